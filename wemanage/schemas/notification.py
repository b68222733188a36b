"""Notification-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel

from wemanage.models.enums import NotificationType


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    id: int
    message: str
    type: NotificationType
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}
