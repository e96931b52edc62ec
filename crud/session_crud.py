from sqlalchemy.orm import Session
from models.session import Session as SessionModel


def get_session_by_token(db: Session, token: str):
    return db.query(SessionModel).filter(SessionModel.token == token).first()


def create_session(db: Session, *, user_id: str, token: str, expires_at, ip_address=None, user_agent=None, two_fa_verified=False):
    s = SessionModel(
        user_id=user_id,
        token=token,
        expires_at=expires_at,
        ip_address=ip_address,
        user_agent=user_agent,
        two_fa_verified=two_fa_verified,
    )
    db.add(s)
    db.flush()
    return s


def mark_two_fa_verified(db: Session, s: SessionModel):
    s.two_fa_verified = True
    db.flush()
    return s


def delete_session(db: Session, s: SessionModel):
    db.delete(s)
    db.flush()
