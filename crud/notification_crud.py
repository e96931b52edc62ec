from sqlalchemy import and_, desc, exists, or_
from sqlalchemy.orm import Session

from models.base import utcnow
from models.notification import Notification, NotificationRead
from models.user import User


def create_notification(db: Session, *, user_id: str | None, title: str, message: str, type: str = "account_activity"):
    n = Notification(user_id=user_id, title=title, message=message, type=type, is_read=False)
    db.add(n)
    db.flush()
    return n


def get_notification(db: Session, notification_id: str):
    return db.query(Notification).filter(Notification.id == notification_id).first()


def _read_marker(user_id: str):
    return exists().where(
        NotificationRead.notification_id == Notification.id,
        NotificationRead.user_id == user_id,
    )


def _visible_to(user: User):
    return and_(
        Notification.created_at >= user.created_at,
        or_(Notification.user_id == user.id, Notification.user_id.is_(None)),
    )


def _is_read(user: User):
    return or_(
        and_(Notification.user_id == user.id, Notification.is_read.is_(True)),
        and_(Notification.user_id.is_(None), _read_marker(user.id)),
    )


def count_for_user(db: Session, user: User, unread_only: bool = False) -> int:
    q = db.query(Notification).filter(_visible_to(user))
    if unread_only:
        q = q.filter(~_is_read(user))
    return q.count()


def list_for_user(
    db: Session,
    user: User,
    status: str | None = None,
    start_date=None,
    end_date=None,
    skip: int = 0,
    limit: int = 10,
):
    """Return (rows, total) where rows are (notification, is_read) pairs, newest first."""
    q = db.query(Notification).filter(_visible_to(user))
    if status == "read":
        q = q.filter(_is_read(user))
    elif status == "unread":
        q = q.filter(~_is_read(user))
    if start_date is not None:
        q = q.filter(Notification.created_at >= start_date)
    if end_date is not None:
        q = q.filter(Notification.created_at <= end_date)

    total = q.count()
    items = q.order_by(desc(Notification.created_at)).offset(skip).limit(limit).all()

    global_ids = [n.id for n in items if n.user_id is None]
    seen = set()
    if global_ids:
        seen = {
            nid for (nid,) in db.query(NotificationRead.notification_id).filter(
                NotificationRead.user_id == user.id,
                NotificationRead.notification_id.in_(global_ids),
            )
        }
    rows = [(n, n.is_read if n.user_id is not None else n.id in seen) for n in items]
    return rows, total


def mark_read(db: Session, notification: Notification, user_id: str):
    if notification.user_id is None:
        already_seen = (
            db.query(NotificationRead)
            .filter(NotificationRead.notification_id == notification.id, NotificationRead.user_id == user_id)
            .first()
        )
        if not already_seen:
            db.add(NotificationRead(notification_id=notification.id, user_id=user_id, seen_at=utcnow()))
    elif not notification.is_read:
        notification.is_read = True
    db.flush()


def mark_all_read(db: Session, user: User) -> int:
    changed = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    unread_global = (
        db.query(Notification.id)
        .filter(_visible_to(user), Notification.user_id.is_(None), ~_read_marker(user.id))
        .all()
    )
    now = utcnow()
    for (nid,) in unread_global:
        db.add(NotificationRead(notification_id=nid, user_id=user.id, seen_at=now))
    db.flush()
    return changed + len(unread_global)
