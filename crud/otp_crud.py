from sqlalchemy.orm import Session
from models.otp import OneTimeCode


def get_code_for_user(db: Session, user_id: str):
    return db.query(OneTimeCode).filter(OneTimeCode.user_id == user_id).first()


def find_code(db: Session, user_id: str, code: str):
    return (
        db.query(OneTimeCode)
        .filter(OneTimeCode.user_id == user_id, OneTimeCode.code == code)
        .first()
    )


def replace_code(db: Session, *, user_id: str, code: str, operation: str, operation_type: str | None, expires_at):
    """Upsert the single code row owned by the user."""
    otp = get_code_for_user(db, user_id)
    if otp is None:
        otp = OneTimeCode(user_id=user_id)
        db.add(otp)
    otp.code = code
    otp.operation = operation
    otp.operation_type = operation_type
    otp.expires_at = expires_at
    db.flush()
    return otp


def delete_code(db: Session, otp: OneTimeCode):
    db.delete(otp)
    db.flush()
