from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    FRIEND_REQUEST = "friend_request"
    FRIEND_ACCEPTED = "friend_accepted"


class NotificationItem(BaseModel):
    id: int = Field(..., description="Notification id", examples=[1])
    type: NotificationType = Field(..., description="Notification type", examples=["friend_request"])
    title: str = Field(..., description="Title", max_length=100, examples=["New friend request"])
    message: str = Field(..., description="Message text", max_length=500,
                         examples=["Jane Smith sent you a friend request"])
    sender_id: Optional[str] = Field(None, description="Sender id", examples=["u2"])
    sender_name: Optional[str] = Field(None, description="Sender display name", examples=["Jane Smith"])
    is_read: bool = Field(default=False, description="Whether it has been read", examples=[False])
    created_at: Optional[datetime] = Field(None, description="Creation time")

    model_config = ConfigDict(from_attributes=True)


class CountResponse(BaseModel):
    count: int = Field(..., ge=0)
