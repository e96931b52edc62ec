from fastapi import APIRouter, Depends, Request

from core.auth import get_current_session, get_current_user, get_two_factor_user
from core.config import settings
from core.dependencies import get_otp_service, get_phone_service
from core.rate_limit import limiter
from schemas.common_schema import ApiResponse
from schemas.otp_schema import SendOtpRequest, SendSmsOtpRequest, VerifyOtpRequest, VerifySmsOtpRequest
from services.otp_service import OtpService
from services.phone_service import PhoneService

router = APIRouter(prefix="/otp", tags=["OTP"])


@router.post("/email/send", response_model=ApiResponse)
@limiter.limit(settings.OTP_RATE_LIMIT)
def send_email_otp(
    request: Request,
    body: SendOtpRequest,
    current_user = Depends(get_current_user),
    otp_service: OtpService = Depends(get_otp_service),
):
    message = otp_service.issue(current_user, body.operation, body.operation_type)
    return ApiResponse(message=message)


@router.post("/email/verify", response_model=ApiResponse)
@limiter.limit(settings.OTP_VERIFY_RATE_LIMIT)
def verify_email_otp(
    request: Request,
    body: VerifyOtpRequest,
    s = Depends(get_current_session),
    current_user = Depends(get_current_user),
    otp_service: OtpService = Depends(get_otp_service),
):
    message = otp_service.verify(current_user, body.otp, body.operation, auth_session=s)
    return ApiResponse(message=message)


@router.post("/sms/send", response_model=ApiResponse)
@limiter.limit(settings.OTP_RATE_LIMIT)
def send_sms_otp(
    request: Request,
    body: SendSmsOtpRequest,
    current_user = Depends(get_two_factor_user),
    phone_service: PhoneService = Depends(get_phone_service),
):
    session_info = phone_service.send(body)
    return ApiResponse(message="OTP sent successfully.", data={"session_info": session_info})


@router.post("/sms/verify", response_model=ApiResponse)
def verify_sms_otp(
    body: VerifySmsOtpRequest,
    current_user = Depends(get_two_factor_user),
    phone_service: PhoneService = Depends(get_phone_service),
):
    phone_number = phone_service.verify(current_user, body)
    return ApiResponse(message="Phone number verified successfully.", data={"phone_number": phone_number})
