from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.auth import require_admin
from core.database import get_db
from core.dependencies import get_notification_service, get_verification_service
from crud.user_crud import list_users
from models.verification import VerificationKind, VerificationStatus
from schemas.common_schema import ApiResponse
from schemas.notification_schema import NotificationCreate
from schemas.user_schema import UserResponse
from schemas.verification_schema import ReviewRequest, VerificationRecordResponse
from services.notification_service import NotificationService
from services.verification_service import VerificationService

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=ApiResponse)
def list_all_users(skip: int = 0, limit: int = Query(100, le=500), db: Session = Depends(get_db)):
    users = [UserResponse.model_validate(u) for u in list_users(db, skip=skip, limit=limit)]
    return ApiResponse(message="Users fetched successfully", data=users)


@router.get("/verifications/{kind}", response_model=ApiResponse)
def list_verifications(
    kind: VerificationKind,
    status: VerificationStatus | None = None,
    skip: int = 0,
    limit: int = Query(100, le=500),
    service: VerificationService = Depends(get_verification_service),
):
    records, counts = service.records(kind, status=status.value if status else None, skip=skip, limit=limit)
    return ApiResponse(
        message="Verification details fetched successfully",
        data={
            "items": [VerificationRecordResponse.model_validate(r) for r in records],
            "counts": counts,
        },
    )


@router.post("/verifications/{kind}/{record_id}/review", response_model=ApiResponse)
def review_verification(
    kind: VerificationKind,
    record_id: str,
    payload: ReviewRequest,
    service: VerificationService = Depends(get_verification_service),
):
    record = service.review(kind, record_id, payload.status, payload.remark)
    return ApiResponse(
        message="Verification status updated successfully.",
        data=VerificationRecordResponse.model_validate(record),
    )


@router.post("/notifications", response_model=ApiResponse, status_code=201)
def create_notification(payload: NotificationCreate, service: NotificationService = Depends(get_notification_service)):
    notification = service.broadcast(payload.title, payload.message, user_id=payload.user_id, type=payload.type)
    return ApiResponse(message="Notification created successfully.", data=notification)
