"""
Workplace Routes

POST /workplace - Create workplace (employer; creator becomes OWNER)
GET /workplace - Paginated list with filters and sorting
GET /workplace/{workplace_id} - Workplace detail
PUT /workplace/{workplace_id} - Update (employer of the workplace)
DELETE /workplace/{workplace_id} - Soft delete (owner or admin)
GET /workplace/{workplace_id}/rating - Rating summary
POST|DELETE /workplace/{workplace_id}/image - Workplace image

Employers:
GET /workplace/employers/me - Workplaces I belong to
GET /workplace/employers/requests/me - My employer requests
GET /workplace/{workplace_id}/employers - Employers of a workplace
POST /workplace/{workplace_id}/employers/request - Ask to join as employer
GET /workplace/{workplace_id}/employers/request - Pending/handled join requests
GET /workplace/{workplace_id}/employers/request/{request_id} - Get join request
POST /workplace/{workplace_id}/employers/request/{request_id} - APPROVE or REJECT
DELETE /workplace/{workplace_id}/employers/{user_id} - Remove employer (owner)

Reviews and replies:
POST|GET /workplace/{workplace_id}/review
GET|PUT|DELETE /workplace/{workplace_id}/review/{review_id}
POST /workplace/{workplace_id}/review/{review_id}/helpful - Toggle helpful
GET|POST|PUT|DELETE /workplace/{workplace_id}/review/{review_id}/reply

Reports:
POST /workplace/{workplace_id}/report
POST /workplace/{workplace_id}/review/{review_id}/report
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, get_optional_user, require_employer
from app.db.postgres import get_db
from app.models import User
from app.models.enums import ReportableEntityType
from app.schemas.schemas import (
    EmployerRequestCreate,
    EmployerRequestResolve,
    EmployerRequestResponse,
    EmployerResponse,
    EmployerWorkplaceResponse,
    ImageResponse,
    MessageResponse,
    PaginatedResponse,
    ReplyRequest,
    ReplyResponse,
    ReportCreate,
    ReportResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    WorkplaceCreate,
    WorkplaceDetailResponse,
    WorkplaceRatingResponse,
    WorkplaceReportRequest,
    WorkplaceSummaryResponse,
    WorkplaceUpdate,
)
from app.services import report_service, review_service, workplace_service

router = APIRouter(prefix="/workplace", tags=["Workplaces"])


# ============================================================
# EMPLOYER SELF-SERVICE
# ============================================================

@router.get("/employers/me", response_model=List[EmployerWorkplaceResponse])
async def list_my_workplaces(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return workplace_service.list_my_workplaces(db, user)


@router.get("/employers/requests/me", response_model=List[EmployerRequestResponse])
async def list_my_employer_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return workplace_service.list_my_employer_requests(db, user)


# ============================================================
# WORKPLACES
# ============================================================

@router.post("", response_model=WorkplaceDetailResponse, status_code=201)
async def create_workplace(data: WorkplaceCreate, employer: User = Depends(require_employer),
                           db: Session = Depends(get_db)):
    return workplace_service.create_workplace(db, employer, data)


@router.get("", response_model=PaginatedResponse[WorkplaceSummaryResponse])
async def list_workplaces(
    page: int = Query(0, ge=0),
    size: int = Query(12, ge=1, le=100),
    search: Optional[str] = None,
    sector: Optional[str] = None,
    location: Optional[str] = None,
    ethical_tag: Optional[str] = None,
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    sort_by: str = "newest",
    db: Session = Depends(get_db),
):
    """sort_by: newest, rating_desc, rating_asc, review_count, name"""
    return workplace_service.list_workplaces(
        db, page=page, size=size, search=search, sector=sector, location=location,
        ethical_tag=ethical_tag, min_rating=min_rating, sort_by=sort_by,
    )


@router.get("/{workplace_id}", response_model=WorkplaceDetailResponse)
async def get_workplace(workplace_id: int, viewer: Optional[User] = Depends(get_optional_user),
                        db: Session = Depends(get_db)):
    return workplace_service.get_workplace_detail(db, workplace_id, viewer)


@router.put("/{workplace_id}", response_model=WorkplaceDetailResponse)
async def update_workplace(workplace_id: int, data: WorkplaceUpdate,
                           user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return workplace_service.update_workplace(db, workplace_id, user, data)


@router.delete("/{workplace_id}", response_model=MessageResponse)
async def delete_workplace(workplace_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    workplace_service.delete_workplace(db, workplace_id, user)
    return MessageResponse(message="Workplace deleted")


@router.get("/{workplace_id}/rating", response_model=WorkplaceRatingResponse)
async def get_rating(workplace_id: int, db: Session = Depends(get_db)):
    return workplace_service.get_rating(db, workplace_id)


@router.post("/{workplace_id}/image", response_model=ImageResponse)
async def upload_image(
    workplace_id: int,
    file: UploadFile = File(..., description="Workplace image (PNG, JPEG or WEBP)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return await workplace_service.upload_image(db, workplace_id, user, file)


@router.delete("/{workplace_id}/image", response_model=MessageResponse)
async def delete_image(workplace_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    workplace_service.delete_image(db, workplace_id, user)
    return MessageResponse(message="Workplace image removed")


# ============================================================
# EMPLOYERS
# ============================================================

@router.get("/{workplace_id}/employers", response_model=List[EmployerResponse])
async def list_employers(workplace_id: int, db: Session = Depends(get_db)):
    return workplace_service.list_employers(db, workplace_id)


@router.post("/{workplace_id}/employers/request", response_model=EmployerRequestResponse, status_code=201)
async def create_employer_request(workplace_id: int, data: EmployerRequestCreate,
                                  employer: User = Depends(require_employer), db: Session = Depends(get_db)):
    return workplace_service.create_employer_request(db, workplace_id, employer, data.note)


@router.get("/{workplace_id}/employers/request", response_model=List[EmployerRequestResponse])
async def list_employer_requests(workplace_id: int, user: User = Depends(get_current_user),
                                 db: Session = Depends(get_db)):
    return workplace_service.list_employer_requests(db, workplace_id, user)


@router.get("/{workplace_id}/employers/request/{request_id}", response_model=EmployerRequestResponse)
async def get_employer_request(workplace_id: int, request_id: int,
                               user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return workplace_service.get_employer_request(db, workplace_id, request_id, user)


@router.post("/{workplace_id}/employers/request/{request_id}", response_model=EmployerRequestResponse)
async def resolve_employer_request(workplace_id: int, request_id: int, data: EmployerRequestResolve,
                                   user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """action: APPROVE or REJECT"""
    return workplace_service.resolve_employer_request(db, workplace_id, request_id, user, data.action)


@router.delete("/{workplace_id}/employers/{employer_user_id}", response_model=MessageResponse)
async def remove_employer(workplace_id: int, employer_user_id: int,
                          user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    workplace_service.remove_employer(db, workplace_id, employer_user_id, user)
    return MessageResponse(message="Employer removed")


# ============================================================
# REVIEWS
# ============================================================

@router.post("/{workplace_id}/review", response_model=ReviewResponse, status_code=201)
async def create_review(workplace_id: int, data: ReviewCreate,
                        user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return review_service.create_review(db, workplace_id, user, data)


@router.get("/{workplace_id}/review", response_model=PaginatedResponse[ReviewResponse])
async def list_reviews(
    workplace_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    rating_filter: Optional[str] = Query(None, description="Comma separated ratings, e.g. 4,5 or 4.5"),
    has_comment: Optional[bool] = None,
    policy: Optional[str] = None,
    sort_by: str = "newest",
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return review_service.list_reviews(
        db, workplace_id, viewer, page=page, size=size, rating_filter=rating_filter,
        has_comment=has_comment, policy=policy, sort_by=sort_by,
    )


@router.get("/{workplace_id}/review/{review_id}", response_model=ReviewResponse)
async def get_review(workplace_id: int, review_id: int, viewer: Optional[User] = Depends(get_optional_user),
                     db: Session = Depends(get_db)):
    return review_service.get_review(db, workplace_id, review_id, viewer)


@router.put("/{workplace_id}/review/{review_id}", response_model=ReviewResponse)
async def update_review(workplace_id: int, review_id: int, data: ReviewUpdate,
                        user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return review_service.update_review(db, workplace_id, review_id, user, data)


@router.delete("/{workplace_id}/review/{review_id}", response_model=MessageResponse)
async def delete_review(workplace_id: int, review_id: int,
                        user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    review_service.delete_review(db, workplace_id, review_id, user)
    return MessageResponse(message="Review deleted")


@router.post("/{workplace_id}/review/{review_id}/helpful", response_model=ReviewResponse)
async def toggle_helpful(workplace_id: int, review_id: int,
                         user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return review_service.toggle_helpful(db, workplace_id, review_id, user)


# ============================================================
# REPLIES
# ============================================================

@router.get("/{workplace_id}/review/{review_id}/reply", response_model=ReplyResponse)
async def get_reply(workplace_id: int, review_id: int, db: Session = Depends(get_db)):
    return review_service.get_reply(db, workplace_id, review_id)


@router.post("/{workplace_id}/review/{review_id}/reply", response_model=ReplyResponse, status_code=201)
async def create_reply(workplace_id: int, review_id: int, data: ReplyRequest,
                       user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return review_service.create_reply(db, workplace_id, review_id, user, data.content)


@router.put("/{workplace_id}/review/{review_id}/reply", response_model=ReplyResponse)
async def update_reply(workplace_id: int, review_id: int, data: ReplyRequest,
                       user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return review_service.update_reply(db, workplace_id, review_id, user, data.content)


@router.delete("/{workplace_id}/review/{review_id}/reply", response_model=MessageResponse)
async def delete_reply(workplace_id: int, review_id: int,
                       user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    review_service.delete_reply(db, workplace_id, review_id, user)
    return MessageResponse(message="Reply deleted")


# ============================================================
# REPORTS
# ============================================================

@router.post("/{workplace_id}/report", response_model=ReportResponse, status_code=201)
async def report_workplace(workplace_id: int, data: WorkplaceReportRequest,
                           user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    report = ReportCreate(
        entity_type=ReportableEntityType.WORKPLACE,
        entity_id=workplace_id,
        reason_type=data.reason_type,
        description=data.description,
    )
    return report_service.create_report(db, user, report)


@router.post("/{workplace_id}/review/{review_id}/report", response_model=ReportResponse, status_code=201)
async def report_review(workplace_id: int, review_id: int, data: WorkplaceReportRequest,
                        user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    workplace_service.get_workplace_entity(db, workplace_id)
    review_service.get_review_entity(db, workplace_id, review_id)
    report = ReportCreate(
        entity_type=ReportableEntityType.REVIEW,
        entity_id=review_id,
        reason_type=data.reason_type,
        description=data.description,
    )
    return report_service.create_report(db, user, report)
