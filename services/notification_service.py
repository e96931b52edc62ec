import logging

from core.errors import ForbiddenError, NotFoundError
from core.notifier import BROADCAST_TOPIC, Notifier, user_topic
from core.unit_of_work import UnitOfWork
from crud import notification_crud, user_crud
from models.user import User
from schemas.common_schema import Pagination
from schemas.notification_schema import NotificationAnalytics, NotificationResponse

logger = logging.getLogger(__name__)


def _to_response(notification, is_read=None) -> NotificationResponse:
    data = NotificationResponse.model_validate(notification)
    if is_read is not None:
        data.is_read = is_read
    return data


class NotificationService:
    """Creates notifications inside a unit of work and pushes them once committed."""

    def __init__(self, uow: UnitOfWork, notifier: Notifier):
        self.uow = uow
        self.notifier = notifier

    def create(self, user_id: str | None, title: str, message: str, type: str = "account_activity"):
        """Stage a notification in the current unit of work.

        The caller owns the transaction; the real-time push is deferred until
        it commits.
        """
        notification = notification_crud.create_notification(
            self.uow.db, user_id=user_id, title=title, message=message, type=type
        )
        payload = _to_response(notification).model_dump(mode="json")
        topic = user_topic(user_id) if user_id else BROADCAST_TOPIC
        self.uow.on_commit(lambda: self.notifier.publish(topic, payload))
        return notification

    def broadcast(self, title: str, message: str, user_id: str | None = None, type: str = "announcement"):
        if user_id and not user_crud.get_user(self.uow.db, user_id):
            raise NotFoundError("User not found")
        with self.uow:
            notification = self.create(user_id, title, message, type=type)
        logger.info("Notification %s created for %s", notification.id, user_id or "all users")
        return _to_response(notification)

    def analytics(self, user: User) -> NotificationAnalytics:
        db = self.uow.db
        return NotificationAnalytics(
            total=notification_crud.count_for_user(db, user),
            unread=notification_crud.count_for_user(db, user, unread_only=True),
        )

    def list_for_user(self, user: User, status=None, start_date=None, end_date=None, page: int = 1, per_page: int = 10):
        rows, total = notification_crud.list_for_user(
            self.uow.db,
            user,
            status=status,
            start_date=start_date,
            end_date=end_date,
            skip=(page - 1) * per_page,
            limit=per_page,
        )
        items = [_to_response(n, is_read) for n, is_read in rows]
        return items, Pagination.build(page, per_page, total)

    def open(self, user: User, notification_id: str) -> NotificationResponse:
        with self.uow:
            notification = notification_crud.get_notification(self.uow.db, notification_id)
            if not notification:
                raise NotFoundError("Notification not found.")
            if notification.user_id is not None and notification.user_id != user.id:
                raise ForbiddenError("Unauthorized access to this notification.")
            notification_crud.mark_read(self.uow.db, notification, user.id)
            data = _to_response(notification, is_read=True)
        return data

    def mark_all_read(self, user: User) -> NotificationAnalytics:
        with self.uow:
            changed = notification_crud.mark_all_read(self.uow.db, user)
        logger.debug("Marked %d notifications read for user %s", changed, user.id)
        return self.analytics(user)
