import enum
import uuid
from sqlalchemy import Column, String, Text, ForeignKey, Index
from models.base import Base, TimestampMixin


class VerificationKind(str, enum.Enum):
    ADDRESS = "address"
    ID = "id"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECT = "reject"


class VerificationRecord(Base, TimestampMixin):
    __tablename__ = "verification_record"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(16), nullable=False)
    status = Column(String(16), default=VerificationStatus.PENDING.value, nullable=False)
    doc_type = Column(String(64), nullable=False)
    issuing_country = Column(String(128), nullable=True)
    residence_country = Column(String(128), nullable=True)
    residence_state = Column(String(128), nullable=True)
    residence_city = Column(String(128), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    residence_zip = Column(String(32), nullable=True)
    document_front_image = Column(String(512), nullable=False)
    document_back_image = Column(String(512), nullable=True)
    remark = Column(Text, nullable=True)

Index("idx_verification_record_user_kind", VerificationRecord.user_id, VerificationRecord.kind, VerificationRecord.created_at.desc())
Index("idx_verification_record_kind_status", VerificationRecord.kind, VerificationRecord.status)
