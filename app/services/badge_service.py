"""
Badge Service

Threshold badges. Each ``check_*`` function counts one activity for a user
and awards every badge of that criteria whose threshold has been reached.
Awarding is idempotent: a badge already earned is never stored twice.
"""

from typing import List

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import (
    Badge,
    CommentVote,
    ForumComment,
    ForumPost,
    JobApplication,
    JobPost,
    MentorProfile,
    MentorReview,
    MentorshipRequest,
    User,
)
from app.models.enums import (
    BadgeCriteria,
    BadgeType,
    JobApplicationStatus,
    MentorshipRequestStatus,
    NotificationType,
    VoteType,
)
from app.core.exceptions import AppError, ErrorCode
from app.schemas.schemas import BadgeResponse, BadgeTypeResponse
from app.services.notification_service import notify_user

logger = structlog.get_logger()

_ACCEPTED_STATUSES = (
    MentorshipRequestStatus.ACCEPTED,
    MentorshipRequestStatus.COMPLETED,
    MentorshipRequestStatus.CLOSED,
)


def has_badge(db: Session, user_id: int, badge_type: BadgeType) -> bool:
    return db.query(Badge.id).filter(
        Badge.user_id == user_id, Badge.badge_type == badge_type
    ).first() is not None


def award_badge(db: Session, user_id: int, badge_type: BadgeType) -> bool:
    """Award a badge once. Returns True when it was newly earned."""
    if has_badge(db, user_id, badge_type):
        return False

    db.add(Badge(user_id=user_id, badge_type=badge_type))
    notify_user(
        db, user_id,
        title="New badge earned",
        notification_type=NotificationType.AWARDED_BADGE,
        message=f"Congratulations! You earned the '{badge_type.display_name}' badge!",
    )
    db.flush()
    logger.info("Badge awarded", user_id=user_id, badge=badge_type.value)
    return True


def _award_for_count(db: Session, user_id: int, criteria: BadgeCriteria, count: int) -> None:
    for badge_type in BadgeType.for_criteria(criteria):
        if count >= badge_type.threshold:
            award_badge(db, user_id, badge_type)


def check_forum_post_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(ForumPost.id)).filter(ForumPost.author_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.FORUM_POSTS, count)


def check_forum_comment_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(ForumComment.id)).filter(ForumComment.author_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.FORUM_COMMENTS, count)


def check_comment_upvote_badges(db: Session, user_id: int) -> None:
    """Counts upvotes received on all comments written by ``user_id``."""
    count = (
        db.query(func.count(CommentVote.id))
        .join(ForumComment, CommentVote.comment_id == ForumComment.id)
        .filter(ForumComment.author_id == user_id, CommentVote.vote_type == VoteType.UPVOTE)
        .scalar()
    )
    _award_for_count(db, user_id, BadgeCriteria.COMMENT_UPVOTES, count)


def check_job_post_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(JobPost.id)).filter(JobPost.employer_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.JOB_POSTS, count)


def check_job_application_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(JobApplication.id)).filter(JobApplication.job_seeker_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.JOB_APPLICATIONS, count)


def check_application_approved_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(JobApplication.id)).filter(
        JobApplication.job_seeker_id == user_id,
        JobApplication.status == JobApplicationStatus.APPROVED,
    ).scalar()
    _award_for_count(db, user_id, BadgeCriteria.APPROVED_APPLICATIONS, count)


def check_mentor_profile_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(MentorProfile.user_id)).filter(MentorProfile.user_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.MENTOR_PROFILE, count)


def check_mentor_accepted_badges(db: Session, mentor_user_id: int) -> None:
    count = db.query(func.count(MentorshipRequest.id)).filter(
        MentorshipRequest.mentor_id == mentor_user_id,
        MentorshipRequest.status.in_(_ACCEPTED_STATUSES),
    ).scalar()
    _award_for_count(db, mentor_user_id, BadgeCriteria.MENTEES_ACCEPTED, count)


def check_mentorship_request_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(MentorshipRequest.id)).filter(
        MentorshipRequest.requester_id == user_id
    ).scalar()
    _award_for_count(db, user_id, BadgeCriteria.MENTORSHIP_REQUESTS_SENT, count)


def check_mentee_accepted_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(MentorshipRequest.id)).filter(
        MentorshipRequest.requester_id == user_id,
        MentorshipRequest.status.in_(_ACCEPTED_STATUSES),
    ).scalar()
    _award_for_count(db, user_id, BadgeCriteria.MENTORSHIPS_RECEIVED, count)


def check_mentor_rating_badges(db: Session, user_id: int) -> None:
    count = db.query(func.count(MentorReview.id)).filter(MentorReview.reviewer_id == user_id).scalar()
    _award_for_count(db, user_id, BadgeCriteria.MENTOR_RATINGS_GIVEN, count)


# ============================================================
# QUERIES
# ============================================================

def get_user_badges(db: Session, user_id: int) -> List[BadgeResponse]:
    if not db.get(User, user_id):
        raise AppError(ErrorCode.USER_NOT_FOUND, "User not found")
    badges = db.query(Badge).filter(Badge.user_id == user_id).order_by(Badge.earned_at, Badge.id).all()
    return [to_badge_response(b) for b in badges]


def get_badge_types() -> List[BadgeTypeResponse]:
    return [
        BadgeTypeResponse(
            badge_type=badge_type,
            name=badge_type.display_name,
            description=badge_type.description,
            criteria=badge_type.criteria,
            threshold=badge_type.threshold,
        )
        for badge_type in BadgeType
    ]


def to_badge_response(badge: Badge) -> BadgeResponse:
    badge_type = badge.badge_type
    return BadgeResponse(
        id=badge.id,
        user_id=badge.user_id,
        badge_type=badge_type,
        name=badge_type.display_name,
        description=badge_type.description,
        criteria=badge_type.criteria,
        threshold=badge_type.threshold,
        earned_at=badge.earned_at,
    )
