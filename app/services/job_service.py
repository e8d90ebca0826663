"""
Job Service

Job posts published by employers for one of their workplaces, and the
applications job seekers send to them.
"""

from typing import List, Optional

import structlog
from fastapi import UploadFile
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.auth import is_admin
from app.core.exceptions import AppError, ErrorCode
from app.models import JobApplication, JobPost, User, Workplace
from app.models.enums import JobApplicationStatus, NotificationType
from app.schemas.schemas import (
    ApplicationCreate,
    ApplicationResponse,
    CvResponse,
    JobPostCreate,
    JobPostResponse,
    JobPostUpdate,
)
from app.services import badge_service
from app.services.notification_service import notify_user
from app.services.workplace_service import get_workplace_entity, require_workplace_employer
from app.utils.file_upload import delete_stored_file, save_pdf

logger = structlog.get_logger()

# NOT NULL columns a partial update may not clear
REQUIRED_JOB_FIELDS = ("title", "description", "remote", "inclusive_opportunity")


def _join_tags(tags: List[str]) -> str:
    return ",".join(t.strip() for t in tags if t and t.strip())


def _split_tags(value: Optional[str]) -> List[str]:
    return [t.strip() for t in (value or "").split(",") if t.strip()]


def to_job_response(job: JobPost) -> JobPostResponse:
    return JobPostResponse(
        id=job.id,
        employer_id=job.employer_id,
        workplace_id=job.workplace_id,
        company_name=job.workplace.company_name,
        title=job.title,
        description=job.description,
        remote=job.remote,
        location=job.location,
        ethical_tags=_split_tags(job.ethical_tags),
        inclusive_opportunity=job.inclusive_opportunity,
        min_salary=job.min_salary,
        max_salary=job.max_salary,
        contact=job.contact,
        posted_date=job.posted_date,
    )


def get_job_entity(db: Session, job_id: int) -> JobPost:
    job = db.get(JobPost, job_id)
    if not job:
        raise AppError(ErrorCode.JOB_POST_NOT_FOUND, "Job post not found")
    return job


# ============================================================
# JOB POSTS
# ============================================================

def list_jobs(
    db: Session,
    title: Optional[str] = None,
    company_name: Optional[str] = None,
    ethical_tags: Optional[List[str]] = None,
    min_salary: Optional[int] = None,
    max_salary: Optional[int] = None,
    is_remote: Optional[bool] = None,
    inclusive_opportunity: Optional[bool] = None,
) -> List[JobPostResponse]:
    query = (
        db.query(JobPost)
        .join(Workplace, JobPost.workplace_id == Workplace.id)
        .filter(Workplace.deleted.is_(False))
    )
    if title:
        query = query.filter(JobPost.title.ilike(f"%{title}%"))
    if company_name:
        query = query.filter(Workplace.company_name.ilike(f"%{company_name}%"))
    if ethical_tags:
        wanted = [t.strip() for t in ethical_tags if t and t.strip()]
        if wanted:
            query = query.filter(or_(*[JobPost.ethical_tags.ilike(f"%{t}%") for t in wanted]))
    if min_salary is not None:
        query = query.filter(or_(JobPost.max_salary.is_(None), JobPost.max_salary >= min_salary))
    if max_salary is not None:
        query = query.filter(or_(JobPost.min_salary.is_(None), JobPost.min_salary <= max_salary))
    if is_remote is not None:
        query = query.filter(JobPost.remote.is_(is_remote))
    if inclusive_opportunity is not None:
        query = query.filter(JobPost.inclusive_opportunity.is_(inclusive_opportunity))

    jobs = query.order_by(JobPost.posted_date.desc(), JobPost.id.desc()).all()
    return [to_job_response(j) for j in jobs]


def list_jobs_by_employer(db: Session, employer_id: int) -> List[JobPostResponse]:
    jobs = (
        db.query(JobPost)
        .filter(JobPost.employer_id == employer_id)
        .order_by(JobPost.posted_date.desc(), JobPost.id.desc())
        .all()
    )
    return [to_job_response(j) for j in jobs]


def list_jobs_by_workplace(db: Session, workplace_id: int) -> List[JobPostResponse]:
    get_workplace_entity(db, workplace_id)
    jobs = (
        db.query(JobPost)
        .filter(JobPost.workplace_id == workplace_id)
        .order_by(JobPost.posted_date.desc(), JobPost.id.desc())
        .all()
    )
    return [to_job_response(j) for j in jobs]


def create_job(db: Session, employer: User, request: JobPostCreate) -> JobPostResponse:
    get_workplace_entity(db, request.workplace_id)
    require_workplace_employer(db, request.workplace_id, employer)

    data = request.model_dump()
    data["ethical_tags"] = _join_tags(request.ethical_tags)
    job = JobPost(employer_id=employer.id, **data)
    db.add(job)
    db.flush()

    badge_service.check_job_post_badges(db, employer.id)
    db.commit()
    logger.info("Job post created", job_post_id=job.id, employer_id=employer.id, workplace_id=job.workplace_id)
    return to_job_response(job)


def update_job(db: Session, job_id: int, user: User, request: JobPostUpdate) -> JobPostResponse:
    job = get_job_entity(db, job_id)
    if job.employer_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only update your own job posts")

    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise AppError(ErrorCode.VALIDATION_ERROR, "No changes provided")
    cleared = [key for key in REQUIRED_JOB_FIELDS if key in changes and changes[key] is None]
    if cleared:
        raise AppError(ErrorCode.VALIDATION_ERROR, f"{', '.join(cleared)} cannot be null")
    if "ethical_tags" in changes:
        changes["ethical_tags"] = _join_tags(request.ethical_tags or [])

    min_salary = changes.get("min_salary", job.min_salary)
    max_salary = changes.get("max_salary", job.max_salary)
    if min_salary is not None and max_salary is not None and min_salary > max_salary:
        raise AppError(ErrorCode.VALIDATION_ERROR, "min_salary cannot be greater than max_salary")

    for key, value in changes.items():
        setattr(job, key, value)
    db.commit()
    logger.info("Job post updated", job_post_id=job.id)
    return to_job_response(job)


def delete_job(db: Session, job_id: int, user: User) -> None:
    job = get_job_entity(db, job_id)
    if job.employer_id != user.id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only delete your own job posts")
    db.delete(job)
    db.commit()
    logger.info("Job post deleted", job_post_id=job_id, by=user.id)


# ============================================================
# APPLICATIONS
# ============================================================

def to_application_response(application: JobApplication) -> ApplicationResponse:
    job = application.job_post
    return ApplicationResponse(
        id=application.id,
        job_post_id=job.id,
        job_title=job.title,
        company_name=job.workplace.company_name,
        workplace_id=job.workplace_id,
        job_seeker_id=application.job_seeker_id,
        applicant_name=application.job_seeker.username,
        status=application.status,
        special_needs=application.special_needs,
        cover_letter=application.cover_letter,
        feedback=application.feedback,
        cv_url=application.cv_url,
        applied_date=application.applied_date,
    )


def get_application_entity(db: Session, application_id: int) -> JobApplication:
    application = db.get(JobApplication, application_id)
    if not application:
        raise AppError(ErrorCode.JOB_APPLICATION_NOT_FOUND, "Job application not found")
    return application


def _can_view(application: JobApplication, user: User) -> bool:
    return user.id in (application.job_seeker_id, application.job_post.employer_id) or is_admin(user)


def get_application(db: Session, application_id: int, user: User) -> ApplicationResponse:
    application = get_application_entity(db, application_id)
    if not _can_view(application, user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You cannot view this application")
    return to_application_response(application)


def _ordered(query):
    return query.order_by(JobApplication.applied_date.desc(), JobApplication.id.desc()).all()


def list_applications(db: Session, user: User, job_seeker_id: Optional[int] = None,
                      job_post_id: Optional[int] = None) -> List[ApplicationResponse]:
    if job_seeker_id is None and job_post_id is None:
        raise AppError(ErrorCode.MISSING_FILTER_PARAMETER, "Provide job_seeker_id or job_post_id")

    query = db.query(JobApplication)
    if job_seeker_id is not None:
        query = query.filter(JobApplication.job_seeker_id == job_seeker_id)
    if job_post_id is not None:
        query = query.filter(JobApplication.job_post_id == job_post_id)
    return [to_application_response(a) for a in _ordered(query) if _can_view(a, user)]


def list_by_job_seeker(db: Session, job_seeker_id: int, user: User) -> List[ApplicationResponse]:
    if user.id != job_seeker_id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only view your own applications")
    query = db.query(JobApplication).filter(JobApplication.job_seeker_id == job_seeker_id)
    return [to_application_response(a) for a in _ordered(query)]


def list_by_job_post(db: Session, job_post_id: int, user: User) -> List[ApplicationResponse]:
    job = get_job_entity(db, job_post_id)
    if job.employer_id != user.id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "Only the job owner can view its applications")
    query = db.query(JobApplication).filter(JobApplication.job_post_id == job_post_id)
    return [to_application_response(a) for a in _ordered(query)]


def list_by_workplace(db: Session, workplace_id: int, user: User) -> List[ApplicationResponse]:
    get_workplace_entity(db, workplace_id)
    if not is_admin(user):
        require_workplace_employer(db, workplace_id, user)
    query = (
        db.query(JobApplication)
        .join(JobPost, JobApplication.job_post_id == JobPost.id)
        .filter(JobPost.workplace_id == workplace_id)
    )
    return [to_application_response(a) for a in _ordered(query)]


def create_application(db: Session, job_seeker: User, request: ApplicationCreate) -> ApplicationResponse:
    job = get_job_entity(db, request.job_post_id)
    exists = db.query(JobApplication.id).filter(
        JobApplication.job_post_id == job.id, JobApplication.job_seeker_id == job_seeker.id
    ).first()
    if exists:
        raise AppError(ErrorCode.APPLICATION_ALREADY_EXISTS, "You have already applied to this job")

    application = JobApplication(
        job_post_id=job.id,
        job_seeker_id=job_seeker.id,
        special_needs=request.special_needs,
        cover_letter=request.cover_letter,
    )
    db.add(application)
    db.flush()

    notify_user(
        db, job.employer_id,
        title="New job application",
        notification_type=NotificationType.JOB_APPLICATION_REQUEST,
        message=f"{job_seeker.username} applied to '{job.title}'",
        link_id=application.id,
    )
    badge_service.check_job_application_badges(db, job_seeker.id)
    db.commit()
    logger.info("Job application created", application_id=application.id, job_post_id=job.id)
    return to_application_response(application)


def _decide(db: Session, application_id: int, user: User, status: JobApplicationStatus,
            feedback: Optional[str]) -> ApplicationResponse:
    application = get_application_entity(db, application_id)
    job = application.job_post
    if job.employer_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "Only the job owner can decide on applications")

    application.status = status
    application.feedback = feedback
    db.flush()

    if status == JobApplicationStatus.APPROVED:
        notify_user(
            db, application.job_seeker_id,
            title="Application approved",
            notification_type=NotificationType.JOB_APPLICATION_APPROVED,
            message=f"Your application to '{job.title}' at {job.workplace.company_name} was approved",
            link_id=application.id,
        )
        badge_service.check_application_approved_badges(db, application.job_seeker_id)
    else:
        notify_user(
            db, application.job_seeker_id,
            title="Application rejected",
            notification_type=NotificationType.JOB_APPLICATION_REJECTED,
            message=f"Your application to '{job.title}' at {job.workplace.company_name} was rejected",
            link_id=application.id,
        )
    db.commit()
    logger.info("Job application decided", application_id=application.id, status=status.value)
    return to_application_response(application)


def approve_application(db: Session, application_id: int, user: User, feedback: Optional[str]) -> ApplicationResponse:
    return _decide(db, application_id, user, JobApplicationStatus.APPROVED, feedback)


def reject_application(db: Session, application_id: int, user: User, feedback: Optional[str]) -> ApplicationResponse:
    return _decide(db, application_id, user, JobApplicationStatus.REJECTED, feedback)


def delete_application(db: Session, application_id: int, user: User) -> None:
    application = get_application_entity(db, application_id)
    if application.job_seeker_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only withdraw your own applications")
    if application.cv_url:
        delete_stored_file(application.cv_url)
    db.delete(application)
    db.commit()
    logger.info("Job application deleted", application_id=application_id)


async def upload_cv(db: Session, application_id: int, user: User, file: UploadFile) -> CvResponse:
    application = get_application_entity(db, application_id)
    if application.job_seeker_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only upload a CV to your own application")
    url, _ = await save_pdf(file, "cv")
    if application.cv_url:
        delete_stored_file(application.cv_url)
    application.cv_url = url
    db.commit()
    return CvResponse(application_id=application.id, cv_url=url)


def get_cv(db: Session, application_id: int, user: User) -> CvResponse:
    application = get_application_entity(db, application_id)
    if not _can_view(application, user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You cannot view this application")
    if not application.cv_url:
        raise AppError(ErrorCode.RESUME_FILE_NOT_FOUND, "No CV uploaded for this application")
    return CvResponse(application_id=application.id, cv_url=application.cv_url)


def delete_cv(db: Session, application_id: int, user: User) -> None:
    application = get_application_entity(db, application_id)
    if application.job_seeker_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only remove your own CV")
    if not application.cv_url:
        raise AppError(ErrorCode.RESUME_FILE_NOT_FOUND, "No CV uploaded for this application")
    delete_stored_file(application.cv_url)
    application.cv_url = None
    db.commit()
