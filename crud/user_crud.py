from sqlalchemy.orm import Session
from sqlalchemy import desc
from models.user import User
from schemas.user_schema import UserUpdate

FULLY_VERIFIED_LEVEL = 1


def get_user(db: Session, user_id: str):
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()


def lock_user(db: Session, user_id: str):
    """SELECT ... FOR UPDATE on the user row, serializing per-user writes until commit."""
    return db.query(User).filter(User.id == user_id).with_for_update().populate_existing().one()


def list_users(db: Session, skip: int = 0, limit: int = 100):
    return db.query(User).order_by(desc(User.created_at)).offset(skip).limit(limit).all()


def create_user(db: Session, *, name: str | None, email: str, password_hash: str, phone_number: str | None = None):
    user = User(
        name=name,
        email=email.lower(),
        password_hash=password_hash,
        phone_number=phone_number,
    )
    db.add(user)
    db.flush()
    return user


def update_user(db: Session, user: User, payload: UserUpdate):
    for k, v in payload.model_dump(exclude_unset=True, exclude={"otp"}).items():
        setattr(user, k, v)
    db.flush()
    return user


def refresh_trust_level(user: User) -> bool:
    """Promote the user once email, phone and ID are all verified.

    Returns True when the level changed.
    """
    if user.user_level >= FULLY_VERIFIED_LEVEL:
        return False
    if user.email_verified_at and user.number_verified_at and user.id_verified_at:
        user.user_level = FULLY_VERIFIED_LEVEL
        return True
    return False
