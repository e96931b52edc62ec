from datetime import datetime
from pydantic import BaseModel


class AddressVerificationRequest(BaseModel):
    doc: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    address1: str | None = None
    address2: str | None = None
    zip: str | None = None
    document_front_image: str | None = None
    document_back_image: str | None = None


class IdVerificationRequest(BaseModel):
    issuing_country: str | None = None
    id_type: str | None = None
    residence_country: str | None = None
    residence_state: str | None = None
    residence_city: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    residence_zip: str | None = None
    document_front_image: str | None = None
    document_back_image: str | None = None


class ReviewRequest(BaseModel):
    status: str | None = None
    remark: str | None = None


class VerificationRecordResponse(BaseModel):
    id: str
    user_id: str
    kind: str
    status: str
    doc_type: str
    issuing_country: str | None = None
    residence_country: str | None = None
    residence_state: str | None = None
    residence_city: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    residence_zip: str | None = None
    document_front_image: str
    document_back_image: str | None = None
    remark: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
