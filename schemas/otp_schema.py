from pydantic import BaseModel


class SendOtpRequest(BaseModel):
    operation: str | None = None
    operation_type: str | None = None


class VerifyOtpRequest(BaseModel):
    otp: str | int | None = None
    operation: str | None = None


class SendSmsOtpRequest(BaseModel):
    phone_number: str | None = None
    country_code: str | None = None


class VerifySmsOtpRequest(BaseModel):
    session_info: str | None = None
    code: str | None = None
