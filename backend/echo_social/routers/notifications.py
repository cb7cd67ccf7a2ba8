"""Notification routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from echo_social.db.dependencies import get_db
from echo_social.schemas.common import MAX_ID, StatusMessage
from echo_social.schemas.notification import NotificationRead, UnreadCount
from echo_social.services.notifications import (
    count_unread_notifications,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

router = APIRouter()


@router.get("/users/{user_id}/notifications", response_model=list[NotificationRead])
def read_notifications(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> list[NotificationRead]:
    """A user's notifications, newest first."""

    return [NotificationRead.model_validate(n) for n in list_notifications(db, user_id)]


@router.get("/users/{user_id}/notifications/unread-count", response_model=UnreadCount)
def read_unread_count(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> UnreadCount:
    return UnreadCount(count=count_unread_notifications(db, user_id))


@router.patch("/notifications/{notification_id}/read", response_model=NotificationRead)
def patch_notification_read(
    notification_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> NotificationRead:
    notification = mark_notification_read(db, notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return NotificationRead.model_validate(notification)


@router.post("/users/{user_id}/notifications/read-all", response_model=StatusMessage)
def mark_all_read(user_id: int = Path(..., ge=1, le=MAX_ID), db: Session = Depends(get_db)) -> StatusMessage:
    mark_all_notifications_read(db, user_id)
    return StatusMessage(message="All notifications marked as read")
