from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from cems.constants.status import NotificationType
from cems.schemas.common import Pagination


class Notification(BaseModel):
    id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: List[Notification]
    unreadCount: int
    pagination: Pagination


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=255)
    message: str = Field(..., min_length=10)
    target_role: Literal["student", "organizer", "all"] = Field("all", alias="targetRole")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}
