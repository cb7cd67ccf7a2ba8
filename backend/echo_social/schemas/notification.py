"""Notification schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from echo_social.schemas.common import CamelModel

NotificationType = Literal["like", "comment", "follow", "message", "anonymous_message"]


class NotificationRead(CamelModel):
    id: int
    user_id: int
    type: NotificationType
    content: str
    reference_id: int | None = None
    read: bool
    created_at: datetime


class UnreadCount(BaseModel):
    count: int
