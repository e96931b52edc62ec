import logging
import re

from core.errors import ValidationError
from core.phone import PhoneVerifier
from core.unit_of_work import UnitOfWork
from crud import user_crud
from models.base import utcnow
from models.user import User
from schemas.otp_schema import SendSmsOtpRequest, VerifySmsOtpRequest
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


class PhoneService:
    def __init__(self, uow: UnitOfWork, verifier: PhoneVerifier, notifications: NotificationService):
        self.uow = uow
        self.verifier = verifier
        self.notifications = notifications

    def send(self, payload: SendSmsOtpRequest) -> str:
        errors = {}
        phone = (payload.phone_number or "").strip()
        country_code = (payload.country_code or "").strip()
        if not phone:
            errors["phone_number"] = ["phone_number is required"]
        elif not PHONE_PATTERN.match(phone):
            errors["phone_number"] = ["Invalid phone number format"]
        if not country_code:
            errors["country_code"] = ["country_code is required"]
        if errors:
            raise ValidationError("Invalid phone number format.", errors=errors)

        return self.verifier.send_code(country_code + phone)

    def verify(self, user: User, payload: VerifySmsOtpRequest) -> str:
        errors = {}
        if not (payload.session_info or "").strip():
            errors["session_info"] = ["session_info is required"]
        if not (payload.code or "").strip():
            errors["code"] = ["code is required"]
        if errors:
            raise ValidationError(errors=errors)

        phone_number = self.verifier.verify_code(payload.session_info.strip(), payload.code.strip())
        with self.uow:
            user.phone_number = phone_number
            user.number_verified_at = utcnow()
            user_crud.refresh_trust_level(user)
            self.uow.db.flush()
            self.notifications.create(
                user.id,
                "Phone number verified successfully.",
                "Your phone number has been confirmed.",
            )
        logger.info("User %s verified phone number", user.id)
        return phone_number
