"""
Job Application Routes

GET /applications - Applications filtered by job_seeker_id and/or job_post_id
GET /applications/job-seeker/{job_seeker_id} - Applications of a job seeker
GET /applications/job-post/{job_post_id} - Applications to a job post
GET /applications/workplace/{workplace_id} - Applications to a workplace's jobs
GET /applications/{application_id} - Get application
POST /applications - Apply to a job (job seeker only)
PUT /applications/{application_id}/approve - Approve (job owner)
PUT /applications/{application_id}/reject - Reject (job owner)
DELETE /applications/{application_id} - Withdraw (applicant)
POST /applications/{application_id}/cv - Upload CV (PDF)
GET /applications/{application_id}/cv - Get CV link
DELETE /applications/{application_id}/cv - Remove CV
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, require_employer, require_jobseeker
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import (
    ApplicationCreate,
    ApplicationDecision,
    ApplicationResponse,
    CvResponse,
    MessageResponse,
)
from app.services import job_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    job_seeker_id: Optional[int] = None,
    job_post_id: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """At least one filter is required."""
    return job_service.list_applications(db, user, job_seeker_id=job_seeker_id, job_post_id=job_post_id)


@router.get("/job-seeker/{job_seeker_id}", response_model=List[ApplicationResponse])
async def list_by_job_seeker(job_seeker_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return job_service.list_by_job_seeker(db, job_seeker_id, user)


@router.get("/job-post/{job_post_id}", response_model=List[ApplicationResponse])
async def list_by_job_post(job_post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return job_service.list_by_job_post(db, job_post_id, user)


@router.get("/workplace/{workplace_id}", response_model=List[ApplicationResponse])
async def list_by_workplace(workplace_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return job_service.list_by_workplace(db, workplace_id, user)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return job_service.get_application(db, application_id, user)


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply(data: ApplicationCreate, job_seeker: User = Depends(require_jobseeker), db: Session = Depends(get_db)):
    """Apply to a job. One application per job post."""
    return job_service.create_application(db, job_seeker, data)


@router.put("/{application_id}/approve", response_model=ApplicationResponse)
async def approve(application_id: int, data: ApplicationDecision,
                  employer: User = Depends(require_employer), db: Session = Depends(get_db)):
    return job_service.approve_application(db, application_id, employer, data.feedback)


@router.put("/{application_id}/reject", response_model=ApplicationResponse)
async def reject(application_id: int, data: ApplicationDecision,
                 employer: User = Depends(require_employer), db: Session = Depends(get_db)):
    return job_service.reject_application(db, application_id, employer, data.feedback)


@router.delete("/{application_id}", response_model=MessageResponse)
async def withdraw(application_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    job_service.delete_application(db, application_id, user)
    return MessageResponse(message="Application withdrawn")


# ============================================================
# CV
# ============================================================

@router.post("/{application_id}/cv", response_model=CvResponse)
async def upload_cv(
    application_id: int,
    file: UploadFile = File(..., description="CV file (PDF)"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return await job_service.upload_cv(db, application_id, user, file)


@router.get("/{application_id}/cv", response_model=CvResponse)
async def get_cv(application_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return job_service.get_cv(db, application_id, user)


@router.delete("/{application_id}/cv", response_model=MessageResponse)
async def delete_cv(application_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    job_service.delete_cv(db, application_id, user)
    return MessageResponse(message="CV removed")
