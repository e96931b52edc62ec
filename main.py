import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core.config import settings
from core.database import Base, engine
from core.errors import AppError, RateLimitError
from core.logging_config import configure_logging
from core.mailer import build_mailer
from core.notifier import WebSocketNotifier
from core.phone import build_phone_verifier
from core.rate_limit import limiter
from routers import admin_router, auth_router, notification_router, otp_router, user_router, verification_router
from models import user, session, otp, notification, verification
from schemas.common_schema import ApiResponse

configure_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=f"{settings.APP_NAME} P2P Backend API")

app.state.limiter = limiter
app.state.notifier = WebSocketNotifier()
app.state.mailer = build_mailer()
app.state.phone_verifier = build_phone_verifier()

# Respect X-Forwarded-Proto/Host when behind a proxy (Docker/nginx/etc.)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


def _envelope(status_code: int, message: str, errors=None, headers=None):
    body = ApiResponse(status=False, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.errors)
    return _envelope(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit hit on %s: %s", request.url.path, exc.detail)
    return _envelope(429, RateLimitError.message, errors=str(exc.detail))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"] if part not in ("body", "query", "path")) or "body"
        errors.setdefault(field, []).append(err["msg"])
    return _envelope(422, "Validation failed.", errors)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(500, "Something went wrong.", errors=str(exc))


app.include_router(auth_router.router)
app.include_router(user_router.router)
app.include_router(otp_router.router)
app.include_router(verification_router.router)
app.include_router(notification_router.router)
app.include_router(admin_router.router)


@app.get("/")
def root():
    return {"status": True, "message": f"{settings.APP_NAME} P2P Backend API Ready"}
