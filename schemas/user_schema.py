from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    name: str | None = None
    email: EmailStr
    password: str = Field(min_length=8)
    phone_number: str | None = None


class UserUpdate(BaseModel):
    name: str | None = None
    two_factor_auth: bool | None = None
    # two_fa_disable code, required to switch two_factor_auth off
    otp: str | int | None = None


class UserResponse(BaseModel):
    id: str
    name: str | None = None
    email: str
    phone_number: str | None = None
    role: str
    two_factor_auth: bool
    email_verified_at: datetime | None = None
    number_verified_at: datetime | None = None
    id_verified_at: datetime | None = None
    address_verified_at: datetime | None = None
    user_level: int
    created_at: datetime | None = None

    model_config = {
        "from_attributes": True,
    }
