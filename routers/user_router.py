from fastapi import APIRouter, Depends
from core.auth import get_two_factor_user
from core.dependencies import get_otp_service, get_uow
from core.unit_of_work import UnitOfWork
from crud.user_crud import update_user as update_user_crud
from models.otp import OtpOperation
from schemas.common_schema import ApiResponse
from schemas.user_schema import UserResponse, UserUpdate
from services.otp_service import OtpService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=ApiResponse)
def get_profile(current_user = Depends(get_two_factor_user)):
    return ApiResponse(message="Profile fetched successfully", data=UserResponse.model_validate(current_user))


@router.patch("/me", response_model=ApiResponse)
def update_profile(
    payload: UserUpdate,
    current_user = Depends(get_two_factor_user),
    uow: UnitOfWork = Depends(get_uow),
    otp_service: OtpService = Depends(get_otp_service),
):
    if payload.two_factor_auth is False and current_user.two_factor_auth:
        # Turning 2FA off consumes a two_fa_disable code first
        otp_service.verify(current_user, payload.otp, OtpOperation.TWO_FA_DISABLE.value)
    with uow:
        update_user_crud(uow.db, current_user, payload)
    return ApiResponse(message="Profile updated successfully", data=UserResponse.model_validate(current_user))
