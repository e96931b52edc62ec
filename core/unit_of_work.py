import logging
from typing import Callable

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Transactional scope over a SQLAlchemy session.

    Used as a context manager: the block commits when it exits cleanly and
    rolls back when an exception escapes it. Callbacks registered with
    ``on_commit`` run only after a successful commit and are discarded on
    rollback, so side effects such as real-time pushes never describe data
    that was not persisted.
    """

    def __init__(self, db: Session):
        self.db = db
        self._after_commit: list[Callable[[], None]] = []

    def __enter__(self):
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    def begin(self):
        self._after_commit = []

    def on_commit(self, callback: Callable[[], None]):
        self._after_commit.append(callback)

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.rollback()
            raise
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("After-commit callback failed")

    def rollback(self):
        self.db.rollback()
        self._after_commit = []
