import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from models.base import Base, TimestampMixin, utcnow

class Notification(Base, TimestampMixin):
    __tablename__ = "notification"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    # NULL user_id means a global notification
    user_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(64), default="account_activity", nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)


class NotificationRead(Base):
    __tablename__ = "notification_read"
    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_notification_read_notification_user"),
    )

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    notification_id = Column(String(64), ForeignKey("notification.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    seen_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

Index("idx_notification_user_created", Notification.user_id, Notification.created_at.desc())
Index("idx_notification_read_user", NotificationRead.user_id)
