"""
Dashboard Service - platform-wide counters for the public stats page.
"""

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import (
    ForumComment,
    ForumPost,
    JobApplication,
    JobPost,
    MentorProfile,
    MentorshipRequest,
    ResumeReview,
    User,
)
from app.models.enums import (
    JobApplicationStatus,
    MentorshipRequestStatus,
    ResumeReviewStatus,
    Role,
)
from app.schemas.schemas import DashboardStatsResponse


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def get_stats(db: Session) -> DashboardStatsResponse:
    week_ago = datetime.utcnow() - timedelta(days=7)

    return DashboardStatsResponse(
        total_users=_count(db, User.id),
        total_employers=_count(db, User.id, User.role == Role.ROLE_EMPLOYER),
        total_job_seekers=_count(db, User.id, User.role == Role.ROLE_JOBSEEKER),
        total_job_posts=_count(db, JobPost.id),
        remote_job_posts=_count(db, JobPost.id, JobPost.remote.is_(True)),
        inclusive_job_posts=_count(db, JobPost.id, JobPost.inclusive_opportunity.is_(True)),
        new_job_posts_this_week=_count(db, JobPost.id, JobPost.posted_date >= week_ago),
        total_applications=_count(db, JobApplication.id),
        pending_applications=_count(db, JobApplication.id, JobApplication.status == JobApplicationStatus.PENDING),
        approved_applications=_count(db, JobApplication.id, JobApplication.status == JobApplicationStatus.APPROVED),
        rejected_applications=_count(db, JobApplication.id, JobApplication.status == JobApplicationStatus.REJECTED),
        total_mentors=_count(db, MentorProfile.user_id),
        active_mentorships=_count(db, ResumeReview.id, ResumeReview.status == ResumeReviewStatus.ACTIVE),
        completed_mentorships=_count(db, ResumeReview.id, ResumeReview.status == ResumeReviewStatus.COMPLETED),
        pending_mentorship_requests=_count(
            db, MentorshipRequest.id, MentorshipRequest.status == MentorshipRequestStatus.PENDING
        ),
        total_forum_posts=_count(db, ForumPost.id),
        total_forum_comments=_count(db, ForumComment.id),
        new_forum_posts_this_week=_count(db, ForumPost.id, ForumPost.created_at >= week_ago),
    )
