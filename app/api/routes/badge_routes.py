"""
Badge Routes

GET /badges/my - Badges earned by the current user
GET /badges/user/{user_id} - Badges earned by a user
GET /badges/types - Every badge type with its criteria and threshold
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import BadgeResponse, BadgeTypeResponse
from app.services import badge_service

router = APIRouter(prefix="/badges", tags=["Badges"])


@router.get("/my", response_model=List[BadgeResponse])
async def my_badges(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return badge_service.get_user_badges(db, user.id)


@router.get("/user/{user_id}", response_model=List[BadgeResponse])
async def user_badges(user_id: int, db: Session = Depends(get_db)):
    return badge_service.get_user_badges(db, user_id)


@router.get("/types", response_model=List[BadgeTypeResponse])
async def badge_types():
    return badge_service.get_badge_types()
