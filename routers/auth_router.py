from datetime import datetime, timedelta, timezone
import logging

from fastapi import APIRouter, Depends, Request

from core.auth import get_current_session, get_current_user
from core.config import settings
from core.dependencies import get_otp_service, get_uow
from core.errors import AuthError, ConflictError
from core.rate_limit import limiter
from core.security import generate_session_token, get_password_hash, verify_password
from core.unit_of_work import UnitOfWork
from crud.session_crud import create_session, delete_session
from crud.user_crud import create_user, get_user_by_email
from models.otp import OtpOperation
from schemas.auth_schema import AuthTokenResponse, LoginRequest
from schemas.common_schema import ApiResponse
from schemas.user_schema import UserCreate, UserResponse
from services.otp_service import OtpService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ApiResponse, status_code=201)
def register(payload: UserCreate, uow: UnitOfWork = Depends(get_uow)):
    if get_user_by_email(uow.db, payload.email):
        raise ConflictError("Email already registered")
    with uow:
        user = create_user(
            uow.db,
            name=payload.name,
            email=payload.email,
            password_hash=get_password_hash(payload.password),
            phone_number=payload.phone_number,
        )
    logger.info("Registered user %s", user.id)
    return ApiResponse(message="Registration successful.", data=UserResponse.model_validate(user))


@router.post("/login", response_model=ApiResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(
    request: Request,
    body: LoginRequest,
    uow: UnitOfWork = Depends(get_uow),
    otp_service: OtpService = Depends(get_otp_service),
):
    """
    Authenticate with email and password and issue a bearer token.
    Accounts with two-factor enabled get a login OTP by email; the token
    stays restricted until it is verified.
    """
    user = get_user_by_email(uow.db, body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise AuthError("Incorrect email or password")

    with uow:
        session = create_session(
            uow.db,
            user_id=user.id,
            token=generate_session_token(),
            expires_at=datetime.now(timezone.utc) + timedelta(days=settings.SESSION_EXPIRE_DAYS),
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            two_fa_verified=not user.two_factor_auth,
        )

    if user.two_factor_auth:
        otp_service.issue(user, OtpOperation.LOGIN.value)

    return ApiResponse(
        message="Login successful.",
        data=AuthTokenResponse(
            access_token=session.token,
            two_factor_required=user.two_factor_auth,
            user=UserResponse.model_validate(user),
        ),
    )


@router.post("/logout", response_model=ApiResponse)
def logout(s = Depends(get_current_session), uow: UnitOfWork = Depends(get_uow)):
    with uow:
        delete_session(uow.db, s)
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse)
def get_me(current_user = Depends(get_current_user)):
    return ApiResponse(message="User fetched successfully", data=UserResponse.model_validate(current_user))
