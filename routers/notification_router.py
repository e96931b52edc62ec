from datetime import date, datetime, time, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from core.auth import get_two_factor_user, resolve_session
from core.database import get_session_factory
from core.dependencies import get_notification_service
from core.notifier import BROADCAST_TOPIC, Notifier, get_notifier, user_topic
from schemas.common_schema import ApiResponse
from services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=ApiResponse)
def list_notifications(
    status_filter: Literal["read", "unread"] | None = Query(None, alias="status"),
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    current_user = Depends(get_two_factor_user),
    service: NotificationService = Depends(get_notification_service),
):
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None
    end = datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None
    items, pagination = service.list_for_user(
        current_user, status=status_filter, start_date=start, end_date=end, page=page, per_page=per_page
    )
    return ApiResponse(
        message="Notifications fetched successfully" if items else "No notifications found matching your criteria.",
        data={
            "items": items,
            "pagination": pagination,
            "analytics": service.analytics(current_user),
        },
    )


@router.post("/read-all", response_model=ApiResponse)
def mark_all_read(current_user = Depends(get_two_factor_user), service: NotificationService = Depends(get_notification_service)):
    analytics = service.mark_all_read(current_user)
    return ApiResponse(message="All unread notifications marked as read successfully.", data={"analytics": analytics})


@router.get("/{notification_id}", response_model=ApiResponse)
def read_notification(
    notification_id: str,
    current_user = Depends(get_two_factor_user),
    service: NotificationService = Depends(get_notification_service),
):
    return ApiResponse(message="Notification fetched successfully!!", data=service.open(current_user, notification_id))


def _socket_user_id(session_factory, token: str | None) -> str | None:
    db = session_factory()
    try:
        s = resolve_session(db, token)
        return s.user_id if s else None
    finally:
        db.close()


@router.websocket("/ws")
async def notification_socket(
    websocket: WebSocket,
    token: str | None = None,
    session_factory = Depends(get_session_factory),
    notifier: Notifier = Depends(get_notifier),
):
    # The session is closed before the socket starts waiting
    user_id = await run_in_threadpool(_socket_user_id, session_factory, token)
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    notifier.subscribe(websocket, [user_topic(user_id), BROADCAST_TOPIC])
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        notifier.unsubscribe(websocket)
