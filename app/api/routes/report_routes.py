"""
Report Routes

POST /report - Report a piece of content
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import ReportCreate, ReportResponse
from app.services import report_service

router = APIRouter(prefix="/report", tags=["Reports"])


@router.post("", response_model=ReportResponse, status_code=201)
async def create_report(data: ReportCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """One report per user per entity. The entity must exist."""
    return report_service.create_report(db, user, data)
