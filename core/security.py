import secrets
import uuid

from pwdlib import PasswordHash

password_hash = PasswordHash.recommended()


def get_password_hash(password: str) -> str:
    return password_hash.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_hash.verify(plain_password, hashed_password)


def generate_session_token() -> str:
    return uuid.uuid4().hex


def generate_otp() -> str:
    # Uniform over [100000, 999999]
    return str(100000 + secrets.randbelow(900000))
