"""
Workplace Service

Workplaces (company pages), the employers linked to them and the requests
employers send to join a workplace.
"""

import math
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from fastapi import UploadFile
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.auth import is_admin
from app.core.exceptions import AppError, ErrorCode
from app.models import (
    EmployerRequest,
    EmployerWorkplace,
    JobPost,
    ReviewPolicyRating,
    User,
    Workplace,
    WorkplaceReview,
)
from app.models.enums import EmployerRequestStatus, EmployerRole, EthicalPolicy, Role
from app.schemas.schemas import (
    EmployerRequestResponse,
    EmployerResponse,
    EmployerWorkplaceResponse,
    ImageResponse,
    PaginatedResponse,
    WorkplaceCreate,
    WorkplaceDetailResponse,
    WorkplaceRatingResponse,
    WorkplaceSummaryResponse,
    WorkplaceUpdate,
)
from app.utils.file_upload import delete_stored_file, save_image

logger = structlog.get_logger()

WORKPLACE_SORTS = ("newest", "rating_desc", "rating_asc", "review_count", "name")
RECENT_REVIEW_COUNT = 3


# ============================================================
# LOOKUPS / AUTHORIZATION
# ============================================================

def get_workplace_entity(db: Session, workplace_id: int) -> Workplace:
    workplace = db.get(Workplace, workplace_id)
    if not workplace or workplace.deleted:
        raise AppError(ErrorCode.WORKPLACE_NOT_FOUND, "Workplace not found")
    return workplace


def get_employer_link(db: Session, workplace_id: int, user_id: int) -> Optional[EmployerWorkplace]:
    return db.query(EmployerWorkplace).filter(
        EmployerWorkplace.workplace_id == workplace_id,
        EmployerWorkplace.user_id == user_id,
    ).first()


def is_workplace_employer(db: Session, workplace_id: int, user_id: int) -> bool:
    return get_employer_link(db, workplace_id, user_id) is not None


def require_workplace_employer(db: Session, workplace_id: int, user: User, owner_only: bool = False) -> None:
    """Raise unless ``user`` is linked to the workplace (as OWNER when owner_only)."""
    link = get_employer_link(db, workplace_id, user.id)
    if not link or (owner_only and link.role != EmployerRole.OWNER):
        raise AppError(
            ErrorCode.WORKPLACE_UNAUTHORIZED,
            "Only the workplace owner can do this" if owner_only else "You are not an employer of this workplace",
        )


def round_rating(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(float(value), 1)


def _average_ratings(db: Session, workplace_ids: List[int]) -> Dict[int, float]:
    if not workplace_ids:
        return {}
    rows = (
        db.query(WorkplaceReview.workplace_id, func.avg(WorkplaceReview.overall_rating))
        .filter(WorkplaceReview.workplace_id.in_(workplace_ids))
        .group_by(WorkplaceReview.workplace_id)
        .all()
    )
    return {workplace_id: round_rating(avg) for workplace_id, avg in rows}


def to_summary(workplace: Workplace, overall_avg: Optional[float]) -> WorkplaceSummaryResponse:
    return WorkplaceSummaryResponse(
        id=workplace.id,
        company_name=workplace.company_name,
        sector=workplace.sector,
        location=workplace.location,
        short_description=workplace.short_description,
        image_url=workplace.image_url,
        ethical_tags=workplace.policies,
        overall_avg=overall_avg,
        review_count=workplace.review_count,
    )


def to_employer_response(link: EmployerWorkplace) -> EmployerResponse:
    return EmployerResponse(
        user_id=link.user_id,
        username=link.user.username,
        email=link.user.email,
        role=link.role,
        joined_at=link.created_at,
    )


# ============================================================
# WORKPLACES
# ============================================================

def create_workplace(db: Session, user: User, request: WorkplaceCreate) -> WorkplaceDetailResponse:
    data = request.model_dump()
    data["ethical_tags"] = [p.value for p in request.ethical_tags]
    workplace = Workplace(**data)
    db.add(workplace)
    db.flush()
    db.add(EmployerWorkplace(user_id=user.id, workplace_id=workplace.id, role=EmployerRole.OWNER))
    db.commit()
    logger.info("Workplace created", workplace_id=workplace.id, owner_id=user.id)
    return get_workplace_detail(db, workplace.id)


def list_workplaces(
    db: Session,
    page: int = 0,
    size: int = 12,
    search: Optional[str] = None,
    sector: Optional[str] = None,
    location: Optional[str] = None,
    ethical_tag: Optional[str] = None,
    min_rating: Optional[float] = None,
    sort_by: str = "newest",
) -> PaginatedResponse[WorkplaceSummaryResponse]:
    query = db.query(Workplace).filter(Workplace.deleted.is_(False))
    if search:
        query = query.filter(Workplace.company_name.ilike(f"%{search}%"))
    if sector:
        query = query.filter(Workplace.sector.ilike(sector))
    if location:
        query = query.filter(Workplace.location.ilike(f"%{location}%"))
    workplaces = query.all()

    # JSON tag membership and averaged ratings are filtered in Python
    if ethical_tag:
        try:
            policy = EthicalPolicy.from_label(ethical_tag)
        except ValueError:
            raise AppError(ErrorCode.BAD_REQUEST, f"Unknown ethical tag: {ethical_tag}")
        workplaces = [w for w in workplaces if policy.value in (w.ethical_tags or [])]

    ratings = _average_ratings(db, [w.id for w in workplaces])
    if min_rating is not None:
        workplaces = [w for w in workplaces if (ratings.get(w.id) or 0) >= min_rating]

    if sort_by not in WORKPLACE_SORTS:
        raise AppError(ErrorCode.BAD_REQUEST, f"sort_by must be one of {', '.join(WORKPLACE_SORTS)}")
    if sort_by == "rating_desc":
        workplaces.sort(key=lambda w: (ratings.get(w.id) or 0, w.review_count), reverse=True)
    elif sort_by == "rating_asc":
        workplaces.sort(key=lambda w: (ratings.get(w.id) or 0, w.review_count))
    elif sort_by == "review_count":
        workplaces.sort(key=lambda w: w.review_count, reverse=True)
    elif sort_by == "name":
        workplaces.sort(key=lambda w: w.company_name.lower())
    else:
        workplaces.sort(key=lambda w: (w.created_at, w.id), reverse=True)

    total = len(workplaces)
    window = workplaces[page * size:(page + 1) * size]
    return PaginatedResponse[WorkplaceSummaryResponse](
        content=[to_summary(w, ratings.get(w.id)) for w in window],
        page=page,
        size=size,
        total_elements=total,
        total_pages=math.ceil(total / size) if size else 0,
    )


def get_rating(db: Session, workplace_id: int) -> WorkplaceRatingResponse:
    workplace = get_workplace_entity(db, workplace_id)
    overall = (
        db.query(func.avg(WorkplaceReview.overall_rating))
        .filter(WorkplaceReview.workplace_id == workplace_id)
        .scalar()
    )
    rows = (
        db.query(ReviewPolicyRating.policy, func.avg(ReviewPolicyRating.score))
        .join(WorkplaceReview, ReviewPolicyRating.review_id == WorkplaceReview.id)
        .filter(WorkplaceReview.workplace_id == workplace_id)
        .group_by(ReviewPolicyRating.policy)
        .all()
    )
    return WorkplaceRatingResponse(
        workplace_id=workplace.id,
        overall_avg=round_rating(overall),
        review_count=workplace.review_count,
        policy_averages={policy.value: round_rating(avg) for policy, avg in rows},
    )


def get_workplace_detail(db: Session, workplace_id: int, viewer: Optional[User] = None) -> WorkplaceDetailResponse:
    # Imported here, review_service depends on this module
    from app.services.review_service import to_review_response

    workplace = get_workplace_entity(db, workplace_id)
    rating = get_rating(db, workplace_id)
    recent = (
        db.query(WorkplaceReview)
        .filter(WorkplaceReview.workplace_id == workplace_id)
        .order_by(WorkplaceReview.created_at.desc(), WorkplaceReview.id.desc())
        .limit(RECENT_REVIEW_COUNT)
        .all()
    )
    summary = to_summary(workplace, rating.overall_avg)
    return WorkplaceDetailResponse(
        **summary.model_dump(),
        detailed_description=workplace.detailed_description,
        website=workplace.website,
        created_at=workplace.created_at,
        employers=[to_employer_response(link) for link in workplace.employers],
        rating=rating,
        recent_reviews=[to_review_response(db, r, viewer) for r in recent],
    )


def update_workplace(db: Session, workplace_id: int, user: User, request: WorkplaceUpdate) -> WorkplaceDetailResponse:
    workplace = get_workplace_entity(db, workplace_id)
    require_workplace_employer(db, workplace_id, user)

    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise AppError(ErrorCode.VALIDATION_ERROR, "No changes provided")
    if "ethical_tags" in changes:
        changes["ethical_tags"] = [p.value for p in (request.ethical_tags or [])]
    for key, value in changes.items():
        setattr(workplace, key, value)
    db.commit()
    logger.info("Workplace updated", workplace_id=workplace_id, user_id=user.id)
    return get_workplace_detail(db, workplace_id, user)


def soft_delete_workplace(db: Session, workplace: Workplace, reason: str) -> None:
    """Hide a workplace and drop its job listings. Reviews are kept for audit."""
    workplace.deleted = True
    for job_post in db.query(JobPost).filter(JobPost.workplace_id == workplace.id).all():
        db.delete(job_post)
    logger.info("Workplace deleted", workplace_id=workplace.id, reason=reason)


def delete_workplace(db: Session, workplace_id: int, user: User) -> None:
    workplace = get_workplace_entity(db, workplace_id)
    if not is_admin(user):
        require_workplace_employer(db, workplace_id, user, owner_only=True)
    soft_delete_workplace(db, workplace, reason=f"Deleted by user {user.id}")
    db.commit()


async def upload_image(db: Session, workplace_id: int, user: User, file: UploadFile) -> ImageResponse:
    workplace = get_workplace_entity(db, workplace_id)
    require_workplace_employer(db, workplace_id, user)
    url = await save_image(file, "workplaces")
    if workplace.image_url:
        delete_stored_file(workplace.image_url)
    workplace.image_url = url
    db.commit()
    return ImageResponse(image_url=workplace.image_url, updated_at=workplace.updated_at)


def delete_image(db: Session, workplace_id: int, user: User) -> None:
    workplace = get_workplace_entity(db, workplace_id)
    require_workplace_employer(db, workplace_id, user)
    if workplace.image_url:
        delete_stored_file(workplace.image_url)
        workplace.image_url = None
        db.commit()


# ============================================================
# EMPLOYERS
# ============================================================

def list_employers(db: Session, workplace_id: int) -> List[EmployerResponse]:
    workplace = get_workplace_entity(db, workplace_id)
    return [to_employer_response(link) for link in workplace.employers]


def list_my_workplaces(db: Session, user: User) -> List[EmployerWorkplaceResponse]:
    links = (
        db.query(EmployerWorkplace)
        .join(Workplace, EmployerWorkplace.workplace_id == Workplace.id)
        .filter(EmployerWorkplace.user_id == user.id, Workplace.deleted.is_(False))
        .order_by(EmployerWorkplace.created_at)
        .all()
    )
    ratings = _average_ratings(db, [link.workplace_id for link in links])
    return [
        EmployerWorkplaceResponse(workplace=to_summary(link.workplace, ratings.get(link.workplace_id)), role=link.role)
        for link in links
    ]


def to_request_response(request: EmployerRequest) -> EmployerRequestResponse:
    return EmployerRequestResponse(
        id=request.id,
        workplace_id=request.workplace_id,
        workplace_name=request.workplace.company_name,
        requester_id=request.requester_id,
        requester_username=request.requester.username,
        note=request.note,
        status=request.status,
        created_at=request.created_at,
        resolved_at=request.resolved_at,
    )


def create_employer_request(db: Session, workplace_id: int, user: User, note: Optional[str]) -> EmployerRequestResponse:
    get_workplace_entity(db, workplace_id)
    if user.role != Role.ROLE_EMPLOYER:
        raise AppError(ErrorCode.ACCESS_DENIED, "Only employers can request to join a workplace")
    if is_workplace_employer(db, workplace_id, user.id):
        raise AppError(ErrorCode.EMPLOYER_ALREADY_ASSIGNED, "You are already an employer of this workplace")

    pending = db.query(EmployerRequest.id).filter(
        EmployerRequest.workplace_id == workplace_id,
        EmployerRequest.requester_id == user.id,
        EmployerRequest.status == EmployerRequestStatus.PENDING,
    ).first()
    if pending:
        raise AppError(ErrorCode.EMPLOYER_REQUEST_ALREADY_EXISTS, "You already have a pending request for this workplace")

    request = EmployerRequest(workplace_id=workplace_id, requester_id=user.id, note=note)
    db.add(request)
    db.commit()
    logger.info("Employer request created", workplace_id=workplace_id, requester_id=user.id)
    return to_request_response(request)


def list_employer_requests(db: Session, workplace_id: int, user: User) -> List[EmployerRequestResponse]:
    get_workplace_entity(db, workplace_id)
    if not is_admin(user):
        require_workplace_employer(db, workplace_id, user)
    requests = (
        db.query(EmployerRequest)
        .filter(EmployerRequest.workplace_id == workplace_id)
        .order_by(EmployerRequest.created_at.desc(), EmployerRequest.id.desc())
        .all()
    )
    return [to_request_response(r) for r in requests]


def _get_request(db: Session, workplace_id: int, request_id: int) -> EmployerRequest:
    request = db.get(EmployerRequest, request_id)
    if not request or request.workplace_id != workplace_id:
        raise AppError(ErrorCode.EMPLOYER_REQUEST_NOT_FOUND, "Employer request not found")
    return request


def get_employer_request(db: Session, workplace_id: int, request_id: int, user: User) -> EmployerRequestResponse:
    get_workplace_entity(db, workplace_id)
    request = _get_request(db, workplace_id, request_id)
    if request.requester_id != user.id and not is_admin(user):
        require_workplace_employer(db, workplace_id, user)
    return to_request_response(request)


def resolve_employer_request(db: Session, workplace_id: int, request_id: int, user: User, action: str) -> EmployerRequestResponse:
    get_workplace_entity(db, workplace_id)
    request = _get_request(db, workplace_id, request_id)
    if not is_admin(user):
        require_workplace_employer(db, workplace_id, user, owner_only=True)
    if request.status != EmployerRequestStatus.PENDING:
        raise AppError(ErrorCode.EMPLOYER_REQUEST_ALREADY_RESOLVED, "Request has already been resolved")

    normalized = (action or "").strip().upper()
    if normalized == "APPROVE":
        if not is_workplace_employer(db, workplace_id, request.requester_id):
            db.add(EmployerWorkplace(
                user_id=request.requester_id, workplace_id=workplace_id, role=EmployerRole.MANAGER,
            ))
        request.status = EmployerRequestStatus.APPROVED
    elif normalized == "REJECT":
        request.status = EmployerRequestStatus.REJECTED
    else:
        raise AppError(ErrorCode.EMPLOYER_REQUEST_INVALID_ACTION, "Action must be APPROVE or REJECT")

    request.resolved_at = datetime.utcnow()
    db.commit()
    logger.info("Employer request resolved", request_id=request_id, status=request.status.value, by=user.id)
    return to_request_response(request)


def list_my_employer_requests(db: Session, user: User) -> List[EmployerRequestResponse]:
    requests = (
        db.query(EmployerRequest)
        .filter(EmployerRequest.requester_id == user.id)
        .order_by(EmployerRequest.created_at.desc(), EmployerRequest.id.desc())
        .all()
    )
    return [to_request_response(r) for r in requests]


def remove_employer(db: Session, workplace_id: int, employer_user_id: int, user: User) -> None:
    get_workplace_entity(db, workplace_id)
    if not is_admin(user):
        require_workplace_employer(db, workplace_id, user, owner_only=True)

    link = get_employer_link(db, workplace_id, employer_user_id)
    if not link:
        raise AppError(ErrorCode.EMPLOYER_LINK_NOT_FOUND, "Employer is not linked to this workplace")

    if link.role == EmployerRole.OWNER:
        owners = db.query(func.count(EmployerWorkplace.id)).filter(
            EmployerWorkplace.workplace_id == workplace_id,
            EmployerWorkplace.role == EmployerRole.OWNER,
        ).scalar()
        if owners <= 1:
            raise AppError(ErrorCode.WORKPLACE_OWNER_MINIMUM_REQUIRED, "A workplace must keep at least one owner")

    db.delete(link)
    db.commit()
    logger.info("Employer removed", workplace_id=workplace_id, employer_id=employer_user_id, by=user.id)
