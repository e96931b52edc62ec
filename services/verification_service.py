import logging
from dataclasses import dataclass

from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.unit_of_work import UnitOfWork
from crud import user_crud, verification_crud
from models.base import utcnow
from models.verification import VerificationKind, VerificationRecord, VerificationStatus
from models.user import User
from schemas.verification_schema import AddressVerificationRequest, IdVerificationRequest
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ADDRESS_DOC_TYPES = ("bank statement", "credit card", "electricity bill", "utility bill")

# client label -> stored value
ID_TYPES = {
    "passport": "passport",
    "driving licence": "driving_licence",
    "id card": "id_card",
}

ID_REQUIRED_FIELDS = (
    "issuing_country",
    "residence_country",
    "residence_state",
    "residence_city",
    "address_line1",
    "residence_zip",
)

EMAIL_FIRST = "Please verify your email before proceeding."

MESSAGES = {
    VerificationKind.ADDRESS: {
        "verified": "You have already verified your address.",
        "pending": "Your address verification is still pending.",
        "created": "Details stored successfully for address verification.",
        "notify_title": "Address verification successfully initiated.",
        "notify_message": "You have successfully submitted your address details. It will be verified shortly.",
        "approved_title": "Address verified successfully",
        "approved_message": "Your address is successfully verified.",
        "rejected_title": "Address verification rejected",
        "default_remark": "Address Verified.",
    },
    VerificationKind.ID: {
        "verified": "You have already verified your ID.",
        "pending": "Your ID verification is still pending.",
        "created": "ID details submitted successfully.",
        "notify_title": "Id verification successfully initiated.",
        "notify_message": "You have successfully added your ID details. It will be verified shortly.",
        "approved_title": "ID verified successfully",
        "approved_message": "Your ID is successfully verified. Now you can trade and create wallet.",
        "rejected_title": "ID verification rejected",
        "default_remark": "ID Verified.",
    },
}

# kind -> user column stamped when a record is approved
VERIFIED_AT_FIELD = {
    VerificationKind.ADDRESS: "address_verified_at",
    VerificationKind.ID: "id_verified_at",
}


@dataclass
class SubmissionResult:
    created: bool
    message: str
    record: VerificationRecord | None = None


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def _clean(value):
    return None if _blank(value) else str(value).strip()


class VerificationService:
    def __init__(self, uow: UnitOfWork, notifications: NotificationService):
        self.uow = uow
        self.notifications = notifications

    def latest(self, user: User, kind: VerificationKind):
        return verification_crud.get_latest_for_user(self.uow.db, user.id, kind.value)

    def _existing_outcome(self, user: User, kind: VerificationKind) -> SubmissionResult | None:
        existing = self.latest(user, kind)
        already_verified = getattr(user, VERIFIED_AT_FIELD[kind]) is not None
        if already_verified or (existing and existing.status == VerificationStatus.VERIFIED.value):
            return SubmissionResult(False, MESSAGES[kind]["verified"], existing)
        if existing and existing.status == VerificationStatus.PENDING.value:
            return SubmissionResult(False, MESSAGES[kind]["pending"], existing)
        return None

    def _submit(self, user: User, kind: VerificationKind, payload, build_fields) -> SubmissionResult:
        """Create a pending record unless an active one exists.

        The user row is locked before the latest record is read, so concurrent
        submissions for the same user see each other's pending record.
        """
        if not user.email_verified_at:
            raise ForbiddenError(EMAIL_FIRST)

        messages = MESSAGES[kind]
        with self.uow:
            user_crud.lock_user(self.uow.db, user.id)
            outcome = self._existing_outcome(user, kind)
            if outcome:
                return outcome
            fields = build_fields(payload)
            record = verification_crud.create_record(self.uow.db, user_id=user.id, kind=kind.value, **fields)
            self.notifications.create(user.id, messages["notify_title"], messages["notify_message"])
        logger.info("User %s submitted %s verification %s", user.id, kind.value, record.id)
        return SubmissionResult(True, messages["created"], record)

    def submit_address(self, user: User, payload: AddressVerificationRequest) -> SubmissionResult:
        return self._submit(user, VerificationKind.ADDRESS, payload, self._address_fields)

    def submit_id(self, user: User, payload: IdVerificationRequest) -> SubmissionResult:
        return self._submit(user, VerificationKind.ID, payload, self._id_fields)

    @staticmethod
    def _address_fields(payload: AddressVerificationRequest) -> dict:
        errors = {}
        doc = (payload.doc or "").strip().lower()
        if doc not in ADDRESS_DOC_TYPES:
            errors["doc"] = [f"doc must be one of: {', '.join(ADDRESS_DOC_TYPES)}"]
        if _blank(payload.document_front_image):
            errors["document_front_image"] = ["Front document is required"]
        if errors:
            raise ValidationError(errors=errors)

        return {
            "doc_type": doc,
            "residence_country": _clean(payload.country),
            "residence_state": _clean(payload.state),
            "residence_city": _clean(payload.city),
            "address_line1": _clean(payload.address1),
            "address_line2": _clean(payload.address2),
            "residence_zip": _clean(payload.zip),
            "document_front_image": payload.document_front_image.strip(),
            "document_back_image": _clean(payload.document_back_image),
        }

    @staticmethod
    def _id_fields(payload: IdVerificationRequest) -> dict:
        errors = {}
        id_type = ID_TYPES.get((payload.id_type or "").strip().lower())
        if id_type is None:
            errors["id_type"] = ["id_type must be passport, driving licence, or id card"]
        for field in ID_REQUIRED_FIELDS:
            if _blank(getattr(payload, field)):
                errors[field] = [f"{field} is required"]
        if _blank(payload.document_front_image):
            errors["document_front_image"] = ["Front document is required"]
        if errors:
            raise ValidationError(errors=errors)

        fields = {field: _clean(getattr(payload, field)) for field in ID_REQUIRED_FIELDS}
        fields.update(
            doc_type=id_type,
            address_line2=_clean(payload.address_line2),
            document_front_image=payload.document_front_image.strip(),
            document_back_image=_clean(payload.document_back_image),
        )
        return fields

    def review(self, kind: VerificationKind, record_id: str, status: str | None, remark: str | None) -> VerificationRecord:
        """Apply an admin decision to a record and propagate it to its owner."""
        status = (status or "").strip().lower()
        if status not in {s.value for s in VerificationStatus}:
            raise ValidationError(errors={"status": ["The status must be pending, verified, or reject."]})
        if status == VerificationStatus.PENDING.value:
            raise ValidationError(errors={"status": ["Pending status cannot be updated."]})
        if status == VerificationStatus.REJECT.value and _blank(remark):
            raise ValidationError(errors={"remark": ["The remark field is required when status is reject."]})

        messages = MESSAGES[kind]
        approved = status == VerificationStatus.VERIFIED.value
        final_remark = _clean(remark) or messages["default_remark"]

        with self.uow:
            db = self.uow.db
            record = verification_crud.get_record(db, record_id, kind=kind.value)
            if not record:
                raise NotFoundError("No verification details found for the given id.")
            verification_crud.update_status(db, record, status, final_remark)

            owner = user_crud.get_user(db, record.user_id)
            setattr(owner, VERIFIED_AT_FIELD[kind], utcnow() if approved else None)
            user_crud.refresh_trust_level(owner)
            db.flush()

            self.notifications.create(
                owner.id,
                messages["approved_title"] if approved else messages["rejected_title"],
                messages["approved_message"] if approved else final_remark,
            )
        logger.info("%s verification %s marked %s", kind.value, record_id, status)
        return record

    def records(self, kind: VerificationKind, status: str | None = None, skip: int = 0, limit: int = 100):
        db = self.uow.db
        return (
            verification_crud.list_records(db, kind.value, status=status, skip=skip, limit=limit),
            verification_crud.status_counts(db, kind.value),
        )
