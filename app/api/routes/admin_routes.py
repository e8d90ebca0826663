"""
Admin Routes (ROLE_ADMIN only)

GET /admin/report - List reports (status, entity_type filters, paginated)
GET /admin/report/{report_id} - Get report
POST /admin/report/{report_id}/resolve - Resolve a pending report
GET /admin/users - List users (role, is_banned filters, paginated)
POST /admin/users/{user_id}/ban - Ban user and remove what they own
POST /admin/users/{user_id}/unban - Lift a ban
POST /admin/users/{user_id}/mentor-ban - Ban user from mentoring
POST /admin/users/{user_id}/mentor-unban - Lift a mentor ban
DELETE /admin/users/{user_id} - Delete user
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import require_admin
from app.db.postgres import get_db
from app.models import User
from app.models.enums import ReportableEntityType, ReportStatus, Role
from app.schemas.schemas import (
    AdminUserResponse,
    BanUserRequest,
    MessageResponse,
    PaginatedResponse,
    ReportResponse,
    ResolveReportRequest,
)
from app.services import report_service

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


# ============================================================
# REPORTS
# ============================================================

@router.get("/report", response_model=PaginatedResponse[ReportResponse])
async def list_reports(
    status: Optional[ReportStatus] = None,
    entity_type: Optional[ReportableEntityType] = None,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return report_service.list_reports(db, status=status, entity_type=entity_type, page=page, size=size)


@router.get("/report/{report_id}", response_model=ReportResponse)
async def get_report(report_id: int, db: Session = Depends(get_db)):
    return report_service.get_report(db, report_id)


@router.post("/report/{report_id}/resolve", response_model=ReportResponse)
async def resolve_report(report_id: int, data: ResolveReportRequest,
                         admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """
    Resolve a pending report.

    Optionally deletes the reported content and bans its creator.
    """
    return report_service.resolve_report(db, report_id, admin, data)


# ============================================================
# USERS
# ============================================================

@router.get("/users", response_model=PaginatedResponse[AdminUserResponse])
async def list_users(
    role: Optional[Role] = None,
    is_banned: Optional[bool] = None,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return report_service.list_users(db, role=role, is_banned=is_banned, page=page, size=size)


@router.post("/users/{user_id}/ban", response_model=AdminUserResponse)
async def ban_user(user_id: int, data: BanUserRequest, db: Session = Depends(get_db)):
    return report_service.ban_user(db, user_id, data.reason)


@router.post("/users/{user_id}/unban", response_model=AdminUserResponse)
async def unban_user(user_id: int, db: Session = Depends(get_db)):
    return report_service.unban_user(db, user_id)


@router.post("/users/{user_id}/mentor-ban", response_model=AdminUserResponse)
async def ban_mentor(user_id: int, data: BanUserRequest, db: Session = Depends(get_db)):
    return report_service.ban_mentor(db, user_id, data.reason)


@router.post("/users/{user_id}/mentor-unban", response_model=AdminUserResponse)
async def unban_mentor(user_id: int, db: Session = Depends(get_db)):
    return report_service.unban_mentor(db, user_id)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    report_service.delete_user(db, user_id, admin)
    return MessageResponse(message="User deleted")
