"""
Dashboard Routes

GET /dashboard/stats - Platform-wide counters
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.postgres import get_db
from app.schemas.schemas import DashboardStatsResponse
from app.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats(db: Session = Depends(get_db)):
    return dashboard_service.get_stats(db)
