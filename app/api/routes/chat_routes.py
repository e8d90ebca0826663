"""
Chat Routes

POST /chat/{conversation_id}/messages - Send a message (participants only)
GET /chat/history/{conversation_id} - Conversation history, oldest first
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import ChatMessageCreate, ChatMessageResponse
from app.services import chat_service

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.post("/{conversation_id}/messages", response_model=ChatMessageResponse, status_code=201)
async def send_message(conversation_id: int, data: ChatMessageCreate,
                       user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return chat_service.send_message(db, conversation_id, user, data.content)


@router.get("/history/{conversation_id}", response_model=List[ChatMessageResponse])
async def get_history(conversation_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return chat_service.get_history(db, conversation_id, user)
