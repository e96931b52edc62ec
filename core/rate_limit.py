from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import settings


def identifier_and_origin(request: Request) -> str:
    """Counter key: the bearer token (or "anonymous") paired with the client address."""
    authorization = request.headers.get("authorization") or ""
    parts = authorization.split()
    identifier = parts[1] if len(parts) == 2 and parts[0].lower() == "bearer" else "anonymous"
    return f"{identifier}:{get_remote_address(request)}"


limiter = Limiter(
    key_func=identifier_and_origin,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri="memory://",
)
