from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from core.database import get_db
from crud.session_crud import get_session_by_token
from crud.user_crud import get_user
from models.base import as_utc
from models.session import Session as SessionModel


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _is_live(s: SessionModel) -> bool:
    return s.expires_at is not None and as_utc(s.expires_at) >= datetime.now(timezone.utc)


def resolve_session(db: Session, token: Optional[str]) -> Optional[SessionModel]:
    """Return the live session for a token, or None when unknown or expired."""
    if not token:
        return None
    s = get_session_by_token(db, token)
    if not s or not _is_live(s):
        return None
    return s


def get_current_session(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    s = get_session_by_token(db, token)
    if not s:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if not _is_live(s):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    return s


def get_current_user(
    s: SessionModel = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    user = get_user(db, s.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_two_factor_user(
    s: SessionModel = Depends(get_current_session),
    current_user = Depends(get_current_user),
):
    """Current user, provided the session cleared two-factor when the account requires it."""
    if current_user.two_factor_auth and not s.two_fa_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Two-factor verification required.")
    return current_user


def require_admin(current_user = Depends(get_two_factor_user)):
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administration rights required")
    return current_user
