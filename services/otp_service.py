"""One-time code lifecycle: issuance by email and verification with side effects.

A user owns at most one code at a time. Issuing a new code overwrites the
previous one whatever its operation. Verifying a code consumes it and applies
the effect registered for the operation in ``OPERATION_EFFECTS``, all inside
one unit of work.

Expired codes are not deleted when a verification attempt detects the
expiry; they stay until the next issuance replaces them.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.errors import ExpiredError, InvalidCodeError, InvalidOperationError, ValidationError
from core.mailer import Mailer, render_template
from core.security import generate_otp
from core.unit_of_work import UnitOfWork
from crud import otp_crud, session_crud, user_crud
from models.base import as_utc, utcnow
from models.otp import OtpOperation
from models.session import Session as SessionModel
from models.user import User
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

TRADE_OPERATION_TYPES = ("buy", "sell")

# operation -> (subject, intro line of the mail body)
OTP_MAILS = {
    OtpOperation.TWO_FA: (
        "Your OTP for Trade Verification",
        "We received a request to initiate a {operation_type} trade.",
    ),
    OtpOperation.TWO_FA_DISABLE: (
        "OTP to Disable Two-Factor Authentication (2FA)",
        "We received a request to disable 2FA.",
    ),
    OtpOperation.LOGIN: (
        "{app_name} Login Verification Code (2FA)",
        "We noticed a login attempt.",
    ),
    OtpOperation.EMAIL_VERIFICATION: (
        "Verify Your Email",
        "Thank you for registering with {app_name}!",
    ),
}


@dataclass
class EffectContext:
    uow: UnitOfWork
    user: User
    auth_session: SessionModel | None
    notifications: NotificationService


def _clear_session_two_factor(ctx: EffectContext):
    if ctx.auth_session is not None:
        session_crud.mark_two_fa_verified(ctx.uow.db, ctx.auth_session)


def _consume_only(ctx: EffectContext):
    pass


def _confirm_email(ctx: EffectContext):
    user = ctx.user
    user.email_verified_at = utcnow()
    if user_crud.refresh_trust_level(user):
        logger.info("User %s promoted to level %s", user.id, user.user_level)
    ctx.uow.db.flush()
    ctx.notifications.create(
        user.id,
        "Email verified successfully.",
        "Congratulations, You have just confirmed your email.",
    )


OPERATION_EFFECTS: dict[OtpOperation, Callable[[EffectContext], None]] = {
    OtpOperation.LOGIN: _clear_session_two_factor,
    OtpOperation.TWO_FA: _clear_session_two_factor,
    OtpOperation.TWO_FA_DISABLE: _consume_only,
    OtpOperation.EMAIL_VERIFICATION: _confirm_email,
}


def parse_operation(value: str | None) -> OtpOperation | None:
    try:
        return OtpOperation((value or OtpOperation.EMAIL_VERIFICATION.value).strip().lower())
    except ValueError:
        return None


class OtpService:
    def __init__(
        self,
        uow: UnitOfWork,
        mailer: Mailer,
        notifications: NotificationService,
        clock=utcnow,
        expire_minutes: int | None = None,
    ):
        self.uow = uow
        self.mailer = mailer
        self.notifications = notifications
        self.clock = clock
        self.expire_minutes = expire_minutes or settings.OTP_EXPIRE_MINUTES

    def issue(self, user: User, operation: str | None = None, operation_type: str | None = None) -> str:
        """Store a fresh code for the user and mail it. Returns the response message."""
        op = parse_operation(operation)
        if op is None:
            raise InvalidOperationError("Invalid operation")

        trade_side = None
        if op is OtpOperation.TWO_FA:
            trade_side = (operation_type or "").strip().lower()
            if trade_side not in TRADE_OPERATION_TYPES:
                raise InvalidOperationError("operation_type must be buy or sell")

        if op is OtpOperation.EMAIL_VERIFICATION and user.email_verified_at:
            return "Email is already verified."

        code = generate_otp()
        expires_at = self.clock() + timedelta(minutes=self.expire_minutes)
        for attempt in (1, 2):
            try:
                with self.uow:
                    otp_crud.replace_code(
                        self.uow.db,
                        user_id=user.id,
                        code=code,
                        operation=op.value,
                        operation_type=trade_side,
                        expires_at=expires_at,
                    )
                break
            except IntegrityError:
                # A concurrent issuer inserted the row first; retry as an update
                if attempt == 2:
                    raise
                logger.info("Concurrent OTP issuance for user %s, retrying", user.id)

        subject, intro = OTP_MAILS[op]
        fmt = {"app_name": settings.APP_NAME, "operation_type": trade_side}
        body = render_template(
            "otp_email.txt",
            {
                "name": user.name or user.email,
                "intro": intro.format(**fmt),
                "otp": code,
                "expire_minutes": self.expire_minutes,
                "app_name": settings.APP_NAME,
            },
        )
        self.mailer.send(user.email, subject.format(**fmt), body)
        logger.info("Issued %s OTP for user %s", op.value, user.id)
        return "OTP sent successfully!"

    def verify(
        self,
        user: User,
        code: str | int | None,
        operation: str | None = None,
        auth_session: SessionModel | None = None,
    ) -> str:
        """Consume a code and apply its operation's effect atomically."""
        submitted = str(code).strip() if code is not None else ""
        if not submitted:
            raise ValidationError("Validation failed", errors={"otp": "OTP is required"})

        op = parse_operation(operation)
        if op is None:
            raise ValidationError("Invalid operation type")

        with self.uow:
            otp = otp_crud.find_code(self.uow.db, user.id, submitted)
            if otp is None:
                logger.info("Rejected OTP for user %s: no match", user.id)
                raise InvalidCodeError()
            if self.clock() >= as_utc(otp.expires_at):
                logger.info("Rejected OTP for user %s: expired", user.id)
                raise ExpiredError()

            otp_crud.delete_code(self.uow.db, otp)
            OPERATION_EFFECTS[op](EffectContext(self.uow, user, auth_session, self.notifications))

        logger.info("Verified %s OTP for user %s", op.value, user.id)
        return "Email OTP verified successfully!"
