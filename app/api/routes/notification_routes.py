"""
Notification Routes

GET /notifications/me - Recent notifications of the current user
POST /notifications/{notification_id}/read - Mark as read (owner)
POST /notifications/broadcast - Notify every active user (admin)
POST /notifications/user/{username} - Notify one user (admin)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, require_admin
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import BroadcastRequest, MessageResponse, NotificationResponse
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/me", response_model=List[NotificationResponse])
async def my_notifications(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Read and unread notifications from the retention window, newest first."""
    return notification_service.get_recent_notifications(db, user)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_as_read(notification_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return notification_service.mark_as_read(db, notification_id, user)


@router.post("/broadcast", response_model=MessageResponse)
async def broadcast(data: BroadcastRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    recipients = notification_service.broadcast(db, data.title, data.message)
    return MessageResponse(message=f"Broadcast sent to {recipients} users")


@router.post("/user/{username}", response_model=NotificationResponse, status_code=201)
async def notify_user(username: str, data: BroadcastRequest,
                      admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    notification = notification_service.notify_username(db, username, data.title, data.message)
    return notification_service.to_notification_response(notification)
