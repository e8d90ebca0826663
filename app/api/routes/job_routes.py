"""
Job Routes

POST /jobs - Create job post (employer of the workplace only)
GET /jobs - List job posts with filters
GET /jobs/employer/{employer_id} - Job posts of an employer
GET /jobs/workplace/{workplace_id} - Job posts of a workplace
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update job (owning employer only)
DELETE /jobs/{job_id} - Delete job (owning employer or admin)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, require_employer
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import JobPostCreate, JobPostResponse, JobPostUpdate, MessageResponse
from app.services import job_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobPostResponse, status_code=201)
async def create_job(job: JobPostCreate, employer: User = Depends(require_employer), db: Session = Depends(get_db)):
    """Create a new job post. The employer must belong to the workplace."""
    return job_service.create_job(db, employer, job)


@router.get("", response_model=List[JobPostResponse])
async def list_jobs(
    title: Optional[str] = None,
    company_name: Optional[str] = None,
    ethical_tags: Optional[List[str]] = Query(None, description="Matches any tag, case-insensitive"),
    min_salary: Optional[int] = Query(None, ge=0),
    max_salary: Optional[int] = Query(None, ge=0),
    is_remote: Optional[bool] = None,
    inclusive_opportunity: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """List job posts of active workplaces, newest first."""
    return job_service.list_jobs(
        db,
        title=title,
        company_name=company_name,
        ethical_tags=ethical_tags,
        min_salary=min_salary,
        max_salary=max_salary,
        is_remote=is_remote,
        inclusive_opportunity=inclusive_opportunity,
    )


@router.get("/employer/{employer_id}", response_model=List[JobPostResponse])
async def list_jobs_by_employer(employer_id: int, db: Session = Depends(get_db)):
    return job_service.list_jobs_by_employer(db, employer_id)


@router.get("/workplace/{workplace_id}", response_model=List[JobPostResponse])
async def list_jobs_by_workplace(workplace_id: int, db: Session = Depends(get_db)):
    return job_service.list_jobs_by_workplace(db, workplace_id)


@router.get("/{job_id}", response_model=JobPostResponse)
async def get_job(job_id: int, db: Session = Depends(get_db)):
    return job_service.to_job_response(job_service.get_job_entity(db, job_id))


@router.put("/{job_id}", response_model=JobPostResponse)
async def update_job(job_id: int, job: JobPostUpdate,
                     employer: User = Depends(require_employer), db: Session = Depends(get_db)):
    return job_service.update_job(db, job_id, employer, job)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    job_service.delete_job(db, job_id, user)
    return MessageResponse(message="Job post deleted")
