import asyncio
import logging
import threading
from typing import Any

from fastapi import WebSocket
from starlette.requests import HTTPConnection

logger = logging.getLogger(__name__)

BROADCAST_TOPIC = "broadcast"


def user_topic(user_id: str) -> str:
    return f"user:{user_id}"


class Notifier:
    """Real-time push contract: fire-and-forget publish of a payload to a topic."""

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError


class WebSocketNotifier(Notifier):
    """Fans published payloads out to the WebSocket connections subscribed to a topic.

    Publishing may happen from FastAPI's threadpool (sync routes), so sends
    are scheduled onto the loop that owns each socket and never awaited.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, set[WebSocket]] = {}
        self._loops: dict[WebSocket, asyncio.AbstractEventLoop] = {}

    def subscribe(self, websocket: WebSocket, topics: list[str]):
        loop = asyncio.get_running_loop()
        with self._lock:
            self._loops[websocket] = loop
            for topic in topics:
                self._subscribers.setdefault(topic, set()).add(websocket)

    def unsubscribe(self, websocket: WebSocket):
        with self._lock:
            self._loops.pop(websocket, None)
            for sockets in self._subscribers.values():
                sockets.discard(websocket)

    def publish(self, topic: str, payload: dict[str, Any]) -> None:
        with self._lock:
            targets = [(ws, self._loops.get(ws)) for ws in self._subscribers.get(topic, ())]
        message = {"event": "new_notification", "data": payload}
        for websocket, loop in targets:
            if loop is None or loop.is_closed():
                continue
            future = asyncio.run_coroutine_threadsafe(websocket.send_json(message), loop)
            future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future):
        if not future.cancelled() and future.exception() is not None:
            logger.warning("Dropped real-time notification: %s", future.exception())


def get_notifier(connection: HTTPConnection) -> Notifier:
    return connection.app.state.notifier
