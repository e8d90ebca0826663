"""
Notification Service

Stores in-app notifications. Every call is synchronous and shares the
caller's session, so a notification is committed together with the event
that produced it.
"""

from datetime import datetime, timedelta
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import AppError, ErrorCode
from app.models import Notification, User
from app.models.enums import NotificationType
from app.schemas.schemas import NotificationResponse

settings = get_settings()
logger = structlog.get_logger()


def notify_user(db: Session, user_id: int, title: str, notification_type: NotificationType,
                message: str, link_id: Optional[int] = None) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        notification_type=notification_type,
        message=message,
        link_id=link_id,
    )
    db.add(notification)
    logger.info("Notification queued", user_id=user_id, type=notification_type.value, link_id=link_id)
    return notification


def notify_username(db: Session, username: str, title: str, message: str) -> Notification:
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise AppError(ErrorCode.USER_NOT_FOUND, "User not found")
    notification = notify_user(db, user.id, title, NotificationType.BROADCAST, message)
    db.commit()
    return notification


def broadcast(db: Session, title: str, message: str) -> int:
    """Send the same notification to every active user. Returns the recipient count."""
    user_ids = [row[0] for row in db.query(User.id).filter(User.is_banned.is_(False)).all()]
    for user_id in user_ids:
        notify_user(db, user_id, title, NotificationType.BROADCAST, message)
    db.commit()
    logger.info("Broadcast sent", recipients=len(user_ids))
    return len(user_ids)


def get_recent_notifications(db: Session, user: User) -> List[NotificationResponse]:
    since = datetime.utcnow() - timedelta(hours=settings.notification_ttl_hours)
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.created_at >= since)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return [to_notification_response(n) for n in notifications]


def mark_as_read(db: Session, notification_id: int, user: User) -> NotificationResponse:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise AppError(ErrorCode.NOTIFICATION_NOT_FOUND, "Notification not found")
    if notification.user_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You cannot modify this notification")

    notification.read = True
    db.commit()
    return to_notification_response(notification)


def to_notification_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        title=notification.title,
        notification_type=notification.notification_type,
        message=notification.message,
        link_id=notification.link_id,
        read=notification.read,
        created_at=notification.created_at,
    )
