from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.auth import get_two_factor_user
from core.dependencies import get_verification_service
from models.verification import VerificationKind
from schemas.common_schema import ApiResponse
from schemas.verification_schema import AddressVerificationRequest, IdVerificationRequest, VerificationRecordResponse
from services.verification_service import SubmissionResult, VerificationService


router = APIRouter(prefix="/verifications", tags=["Verifications"])


def _submission_response(result: SubmissionResult):
    body = ApiResponse(
        message=result.message,
        data=VerificationRecordResponse.model_validate(result.record) if result.record else None,
    )
    return JSONResponse(status_code=201 if result.created else 200, content=body.model_dump(mode="json"))


def _latest_response(record, label: str):
    return ApiResponse(
        message=f"{label} verification details retrieved successfully",
        data=VerificationRecordResponse.model_validate(record) if record else None,
    )


@router.post("/address", response_model=ApiResponse)
def submit_address(
    payload: AddressVerificationRequest,
    current_user = Depends(get_two_factor_user),
    service: VerificationService = Depends(get_verification_service),
):
    return _submission_response(service.submit_address(current_user, payload))


@router.get("/address", response_model=ApiResponse)
def read_address(current_user = Depends(get_two_factor_user), service: VerificationService = Depends(get_verification_service)):
    return _latest_response(service.latest(current_user, VerificationKind.ADDRESS), "Address")


@router.post("/id", response_model=ApiResponse)
def submit_id(
    payload: IdVerificationRequest,
    current_user = Depends(get_two_factor_user),
    service: VerificationService = Depends(get_verification_service),
):
    return _submission_response(service.submit_id(current_user, payload))


@router.get("/id", response_model=ApiResponse)
def read_id(current_user = Depends(get_two_factor_user), service: VerificationService = Depends(get_verification_service)):
    return _latest_response(service.latest(current_user, VerificationKind.ID), "ID")
