from datetime import datetime
from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    user_id: str | None = None
    type: str = "announcement"


class NotificationResponse(BaseModel):
    id: str
    user_id: str | None = None
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class NotificationAnalytics(BaseModel):
    total: int
    unread: int
