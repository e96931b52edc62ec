import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from models.base import Base, TimestampMixin


class OtpOperation(str, enum.Enum):
    EMAIL_VERIFICATION = "email_verification"
    TWO_FA = "two_fa"
    LOGIN = "login"
    TWO_FA_DISABLE = "two_fa_disable"


class OneTimeCode(Base, TimestampMixin):
    __tablename__ = "one_time_code"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    # One active code per user; issuing a new one overwrites this row
    user_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True)
    code = Column(String(6), nullable=False)
    operation = Column(String(32), nullable=False)
    operation_type = Column(String(16), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
