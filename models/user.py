import uuid
from sqlalchemy import Column, String, Boolean, Integer, DateTime
from models.base import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "user"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=True)
    role = Column(String(16), default="user", nullable=False)
    two_factor_auth = Column(Boolean, default=False, nullable=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    number_verified_at = Column(DateTime(timezone=True), nullable=True)
    id_verified_at = Column(DateTime(timezone=True), nullable=True)
    address_verified_at = Column(DateTime(timezone=True), nullable=True)
    user_level = Column(Integer, default=0, nullable=False)

    @property
    def is_admin(self):
        return self.role == "admin"
