from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from jarimae.models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    reservation_id: Optional[int] = None
    message: str
    type: NotificationType
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationUpdate(BaseModel):
    is_read: bool
