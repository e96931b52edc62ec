from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from core.mailer import Mailer, get_mailer
from core.notifier import Notifier, get_notifier
from core.phone import PhoneVerifier, get_phone_verifier
from core.unit_of_work import UnitOfWork
from services.notification_service import NotificationService
from services.otp_service import OtpService
from services.phone_service import PhoneService
from services.verification_service import VerificationService


def get_uow(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_notification_service(
    uow: UnitOfWork = Depends(get_uow),
    notifier: Notifier = Depends(get_notifier),
) -> NotificationService:
    return NotificationService(uow, notifier)


def get_otp_service(
    uow: UnitOfWork = Depends(get_uow),
    mailer: Mailer = Depends(get_mailer),
    notifications: NotificationService = Depends(get_notification_service),
) -> OtpService:
    return OtpService(uow, mailer, notifications)


def get_verification_service(
    uow: UnitOfWork = Depends(get_uow),
    notifications: NotificationService = Depends(get_notification_service),
) -> VerificationService:
    return VerificationService(uow, notifications)


def get_phone_service(
    uow: UnitOfWork = Depends(get_uow),
    verifier: PhoneVerifier = Depends(get_phone_verifier),
    notifications: NotificationService = Depends(get_notification_service),
) -> PhoneService:
    return PhoneService(uow, verifier, notifications)
