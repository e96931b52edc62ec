from pydantic import BaseModel
from schemas.user_schema import UserResponse


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    two_factor_required: bool = False
    user: UserResponse
