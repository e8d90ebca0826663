"""
Report & Moderation Service

Users report content; admins resolve reports and moderate users.

Resolving a report captures the content creator first, then optionally
deletes the content, then optionally bans the creator, and finally stores
the decision.
"""

import math
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, ErrorCode
from app.models import (
    Badge,
    EmployerWorkplace,
    ForumComment,
    ForumPost,
    JobApplication,
    JobPost,
    MentorProfile,
    Profile,
    Report,
    ReviewReply,
    User,
    Workplace,
    WorkplaceReview,
)
from app.models.enums import EmployerRole, ReportableEntityType, ReportStatus, Role
from app.schemas.schemas import (
    AdminUserResponse,
    PaginatedResponse,
    ReportCreate,
    ReportResponse,
    ResolveReportRequest,
)
from app.services import auth_service, forum_service, review_service, workplace_service
from app.utils.file_upload import delete_stored_file

logger = structlog.get_logger()


# ============================================================
# ENTITY LOOKUP
# ============================================================

_ENTITY_MODELS = {
    ReportableEntityType.WORKPLACE: Workplace,
    ReportableEntityType.REVIEW: WorkplaceReview,
    ReportableEntityType.FORUM_POST: ForumPost,
    ReportableEntityType.FORUM_COMMENT: ForumComment,
    ReportableEntityType.JOB_POST: JobPost,
    ReportableEntityType.JOB_APPLICATION: JobApplication,
    ReportableEntityType.REVIEW_REPLY: ReviewReply,
    ReportableEntityType.PROFILE: Profile,
    ReportableEntityType.MENTOR: MentorProfile,
}


def _load_entity(db: Session, entity_type: ReportableEntityType, entity_id: int):
    entity = db.get(_ENTITY_MODELS[entity_type], entity_id)
    if entity_type == ReportableEntityType.WORKPLACE and entity is not None and entity.deleted:
        return None
    return entity


def _describe(entity_type: ReportableEntityType, entity) -> str:
    if entity is None:
        return "[deleted]"
    if entity_type == ReportableEntityType.WORKPLACE:
        return entity.company_name
    if entity_type == ReportableEntityType.REVIEW:
        return entity.title or f"Review of {entity.workplace.company_name}"
    if entity_type == ReportableEntityType.FORUM_POST:
        return entity.title
    if entity_type == ReportableEntityType.FORUM_COMMENT:
        return entity.content[:80]
    if entity_type == ReportableEntityType.JOB_POST:
        return entity.title
    if entity_type == ReportableEntityType.JOB_APPLICATION:
        return f"Application of {entity.job_seeker.username} to {entity.job_post.title}"
    if entity_type == ReportableEntityType.REVIEW_REPLY:
        return f"Reply to review #{entity.review_id}"
    if entity_type == ReportableEntityType.PROFILE:
        return f"{entity.first_name} {entity.last_name}"
    return f"Mentor {entity.user.username}"


def _creator_id(db: Session, entity_type: ReportableEntityType, entity) -> Optional[int]:
    """User responsible for a piece of content. Workplaces resolve to their first owner."""
    if entity is None:
        return None
    if entity_type == ReportableEntityType.WORKPLACE:
        owner = db.query(EmployerWorkplace).filter(
            EmployerWorkplace.workplace_id == entity.id,
            EmployerWorkplace.role == EmployerRole.OWNER,
        ).order_by(EmployerWorkplace.created_at).first()
        return owner.user_id if owner else None
    if entity_type == ReportableEntityType.REVIEW:
        return entity.user_id
    if entity_type in (ReportableEntityType.FORUM_POST, ReportableEntityType.FORUM_COMMENT):
        return entity.author_id
    if entity_type == ReportableEntityType.JOB_POST:
        return entity.employer_id
    if entity_type == ReportableEntityType.JOB_APPLICATION:
        return entity.job_seeker_id
    if entity_type == ReportableEntityType.REVIEW_REPLY:
        return entity.employer_user_id
    return entity.user_id


def _delete_content(db: Session, entity_type: ReportableEntityType, entity, reason: str) -> None:
    if entity is None:
        return
    if entity_type == ReportableEntityType.WORKPLACE:
        workplace_service.soft_delete_workplace(db, entity, reason)
    elif entity_type == ReportableEntityType.REVIEW:
        review_service.remove_review(db, entity, reason)
    elif entity_type == ReportableEntityType.FORUM_POST:
        forum_service.remove_post(db, entity, reason)
    elif entity_type == ReportableEntityType.FORUM_COMMENT:
        forum_service.remove_comment(db, entity, reason)
    elif entity_type == ReportableEntityType.JOB_APPLICATION:
        if entity.cv_url:
            delete_stored_file(entity.cv_url)
        db.delete(entity)
    elif entity_type == ReportableEntityType.PROFILE:
        if entity.image_url:
            delete_stored_file(entity.image_url)
        db.delete(entity)
    else:
        db.delete(entity)
    logger.info("Reported content deleted", entity_type=entity_type.value, entity_id=entity.id, reason=reason)


def to_report_response(db: Session, report: Report) -> ReportResponse:
    entity = _load_entity(db, report.entity_type, report.entity_id)
    return ReportResponse(
        id=report.id,
        entity_type=report.entity_type,
        entity_id=report.entity_id,
        entity_name=_describe(report.entity_type, entity),
        created_by=report.created_by,
        created_by_username=report.reporter.username,
        reason_type=report.reason_type,
        description=report.description,
        status=report.status,
        admin_note=report.admin_note,
        created_at=report.created_at,
        resolved_at=report.resolved_at,
    )


# ============================================================
# REPORTS
# ============================================================

def create_report(db: Session, user: User, request: ReportCreate) -> ReportResponse:
    entity = _load_entity(db, request.entity_type, request.entity_id)
    if entity is None:
        raise AppError(ErrorCode.NOT_FOUND, f"{request.entity_type.value} {request.entity_id} not found")

    duplicate = db.query(Report.id).filter(
        Report.created_by == user.id,
        Report.entity_type == request.entity_type,
        Report.entity_id == request.entity_id,
    ).first()
    if duplicate:
        raise AppError(ErrorCode.BAD_REQUEST, "You have already reported this content")

    report = Report(
        entity_type=request.entity_type,
        entity_id=request.entity_id,
        created_by=user.id,
        reason_type=request.reason_type,
        description=request.description,
        status=ReportStatus.PENDING,
    )
    db.add(report)
    db.commit()
    logger.info("Report created", report_id=report.id, entity_type=report.entity_type.value,
                entity_id=report.entity_id, reporter=user.id)
    return to_report_response(db, report)


def list_reports(db: Session, status: Optional[ReportStatus] = None,
                 entity_type: Optional[ReportableEntityType] = None,
                 page: int = 0, size: int = 20) -> PaginatedResponse[ReportResponse]:
    query = db.query(Report)
    if status is not None:
        query = query.filter(Report.status == status)
    if entity_type is not None:
        query = query.filter(Report.entity_type == entity_type)

    total = query.count()
    reports = query.order_by(Report.created_at.desc(), Report.id.desc()).offset(page * size).limit(size).all()
    return PaginatedResponse[ReportResponse](
        content=[to_report_response(db, r) for r in reports],
        page=page,
        size=size,
        total_elements=total,
        total_pages=math.ceil(total / size) if size else 0,
    )


def get_report_entity(db: Session, report_id: int) -> Report:
    report = db.get(Report, report_id)
    if not report:
        raise AppError(ErrorCode.REPORT_NOT_FOUND, "Report not found")
    return report


def get_report(db: Session, report_id: int) -> ReportResponse:
    return to_report_response(db, get_report_entity(db, report_id))


def resolve_report(db: Session, report_id: int, admin: User, request: ResolveReportRequest) -> ReportResponse:
    report = get_report_entity(db, report_id)
    if report.status != ReportStatus.PENDING:
        raise AppError(ErrorCode.BAD_REQUEST, "Report has already been resolved")

    entity = _load_entity(db, report.entity_type, report.entity_id)
    creator_id = _creator_id(db, report.entity_type, entity)

    if request.delete_content:
        _delete_content(db, report.entity_type, entity, reason=f"Report {report.id} resolved by admin {admin.id}")
        db.flush()

    if request.ban_user and creator_id is not None:
        creator = db.get(User, creator_id)
        if creator is not None and not creator.is_banned:
            _apply_ban(db, creator, request.ban_reason or f"Banned after report {report.id}")

    report.status = request.status
    report.admin_note = request.admin_note
    report.resolved_at = datetime.utcnow()
    db.commit()
    logger.info("Report resolved", report_id=report.id, status=report.status.value,
                deleted=request.delete_content, banned=request.ban_user and creator_id is not None)
    return to_report_response(db, report)


# ============================================================
# USER MODERATION
# ============================================================

def to_admin_user_response(user: User) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_banned=user.is_banned,
        ban_reason=user.ban_reason,
        is_mentor_banned=user.is_mentor_banned,
        mentor_ban_reason=user.mentor_ban_reason,
    )


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise AppError(ErrorCode.USER_NOT_FOUND, "User not found")
    return user


def list_users(db: Session, role: Optional[Role] = None, is_banned: Optional[bool] = None,
               page: int = 0, size: int = 20) -> PaginatedResponse[AdminUserResponse]:
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    if is_banned is not None:
        query = query.filter(User.is_banned.is_(is_banned))

    total = query.count()
    users = query.order_by(User.id).offset(page * size).limit(size).all()
    return PaginatedResponse[AdminUserResponse](
        content=[to_admin_user_response(u) for u in users],
        page=page,
        size=size,
        total_elements=total,
        total_pages=math.ceil(total / size) if size else 0,
    )


def _owned_workplaces(db: Session, user_id: int):
    return (
        db.query(Workplace)
        .join(EmployerWorkplace, EmployerWorkplace.workplace_id == Workplace.id)
        .filter(
            EmployerWorkplace.user_id == user_id,
            EmployerWorkplace.role == EmployerRole.OWNER,
            Workplace.deleted.is_(False),
        )
        .all()
    )


def _apply_ban(db: Session, user: User, reason: str) -> None:
    """Ban a user and remove what they own. Forum and review content stays."""
    user.is_banned = True
    user.ban_reason = reason

    if user.profile is not None:
        if user.profile.image_url:
            delete_stored_file(user.profile.image_url)
        db.delete(user.profile)
    db.query(Badge).filter(Badge.user_id == user.id).delete(synchronize_session=False)

    mentor = db.get(MentorProfile, user.id)
    if mentor is not None:
        db.delete(mentor)

    for application in db.query(JobApplication).filter(JobApplication.job_seeker_id == user.id).all():
        if application.cv_url:
            delete_stored_file(application.cv_url)
        db.delete(application)

    for workplace in _owned_workplaces(db, user.id):
        workplace_service.soft_delete_workplace(db, workplace, reason=f"Owner {user.id} banned")

    logger.warning("User banned", user_id=user.id, reason=reason)


def ban_user(db: Session, user_id: int, reason: str) -> AdminUserResponse:
    user = _get_user(db, user_id)
    if user.is_banned:
        raise AppError(ErrorCode.BAD_REQUEST, "User is already banned")
    _apply_ban(db, user, reason)
    db.commit()
    return to_admin_user_response(user)


def unban_user(db: Session, user_id: int) -> AdminUserResponse:
    user = _get_user(db, user_id)
    if not user.is_banned:
        raise AppError(ErrorCode.BAD_REQUEST, "User is not banned")
    user.is_banned = False
    user.ban_reason = None
    db.commit()
    logger.info("User unbanned", user_id=user.id)
    return to_admin_user_response(user)


def ban_mentor(db: Session, user_id: int, reason: str) -> AdminUserResponse:
    user = _get_user(db, user_id)
    if user.is_mentor_banned:
        raise AppError(ErrorCode.BAD_REQUEST, "User is already banned from mentorship")
    user.is_mentor_banned = True
    user.mentor_ban_reason = reason
    mentor = db.get(MentorProfile, user.id)
    if mentor is not None:
        db.delete(mentor)
    db.commit()
    logger.warning("User banned from mentorship", user_id=user.id, reason=reason)
    return to_admin_user_response(user)


def unban_mentor(db: Session, user_id: int) -> AdminUserResponse:
    user = _get_user(db, user_id)
    if not user.is_mentor_banned:
        raise AppError(ErrorCode.BAD_REQUEST, "User is not banned from mentorship")
    user.is_mentor_banned = False
    user.mentor_ban_reason = None
    db.commit()
    logger.info("User unbanned from mentorship", user_id=user.id)
    return to_admin_user_response(user)


def delete_user(db: Session, user_id: int, admin: User) -> None:
    user = _get_user(db, user_id)
    if user.id == admin.id:
        raise AppError(ErrorCode.BAD_REQUEST, "Admins cannot delete their own account here")
    auth_service.delete_account(db, user)
