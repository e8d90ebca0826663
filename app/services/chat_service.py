"""
Chat Service

REST chat between a mentor and a mentee. Each accepted mentorship owns one
conversation; it is closed with a system message when the mentorship ends.
"""

from datetime import datetime
from typing import List

import structlog
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, ErrorCode
from app.models import ChatMessage, Conversation, ResumeReview, User
from app.models.enums import NotificationType
from app.schemas.schemas import ChatMessageResponse
from app.services.notification_service import notify_user

logger = structlog.get_logger()

SYSTEM_SENDER = "System"


def to_message_response(message: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        sender_username=message.sender.username if message.sender else SYSTEM_SENDER,
        content=message.content,
        created_at=message.created_at,
    )


def create_conversation_for_review(db: Session, review: ResumeReview) -> Conversation:
    conversation = Conversation(
        resume_review_id=review.id,
        mentor_id=review.mentor_id,
        mentee_id=review.job_seeker_id,
    )
    db.add(conversation)
    db.flush()
    return conversation


def close_conversation(db: Session, review: ResumeReview, system_message: str) -> None:
    conversation = review.conversation
    if conversation is None or conversation.is_closed:
        return
    conversation.closed_at = datetime.utcnow()
    db.add(ChatMessage(conversation_id=conversation.id, sender_id=None, content=system_message))


def _get_conversation(db: Session, conversation_id: int, user: User) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if not conversation:
        raise AppError(ErrorCode.CONVERSATION_NOT_FOUND, "Conversation not found")
    if not conversation.has_participant(user.id):
        raise AppError(ErrorCode.ACCESS_DENIED, "You are not a participant of this conversation")
    return conversation


def send_message(db: Session, conversation_id: int, sender: User, content: str) -> ChatMessageResponse:
    conversation = _get_conversation(db, conversation_id, sender)
    if conversation.is_closed:
        raise AppError(ErrorCode.MENTORSHIP_NOT_ACTIVE, "This conversation is closed")

    message = ChatMessage(conversation_id=conversation.id, sender_id=sender.id, content=content)
    db.add(message)
    db.flush()

    recipient_id = conversation.mentee_id if sender.id == conversation.mentor_id else conversation.mentor_id
    notify_user(
        db, recipient_id,
        title="New message",
        notification_type=NotificationType.NEW_MESSAGE,
        message=f"{sender.username} sent you a message",
        link_id=conversation.id,
    )
    db.commit()
    logger.info("Chat message sent", conversation_id=conversation.id, sender_id=sender.id)
    return to_message_response(message)


def get_history(db: Session, conversation_id: int, user: User) -> List[ChatMessageResponse]:
    conversation = _get_conversation(db, conversation_id, user)
    messages = (
        db.query(ChatMessage)
        .filter(ChatMessage.conversation_id == conversation.id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        .all()
    )
    return [to_message_response(m) for m in messages]
