"""
Mentorship Service

Mentor profiles, mentorship requests and the resume reviews that accepted
requests turn into.

Request lifecycle:
    PENDING -> ACCEPTED | REJECTED | CANCELLED
    ACCEPTED -> COMPLETED | CLOSED   (through the resume review)

Capacity: accepting increments the mentor's current_mentees, completing or
closing decrements it (never below zero).
"""

from datetime import datetime
from typing import List

import structlog
from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.core.exceptions import AppError, ErrorCode
from app.models import (
    Conversation,
    MentorProfile,
    MentorReview,
    MentorshipRequest,
    ResumeReview,
    User,
)
from app.models.enums import (
    MentorshipRequestStatus,
    NotificationType,
    ResumeReviewStatus,
)
from app.schemas.schemas import (
    MentorProfileCreate,
    MentorProfileResponse,
    MentorProfileUpdate,
    MentorReviewResponse,
    MentorshipRequestCreate,
    MentorshipRequestResponse,
    MentorshipRespondRequest,
    RatingCreate,
    ResumeFileResponse,
    ResumeReviewResponse,
)
from app.services import badge_service, chat_service
from app.services.notification_service import notify_user
from app.utils.file_upload import delete_stored_file, save_pdf

logger = structlog.get_logger()


# ============================================================
# MAPPERS / LOOKUPS
# ============================================================

def to_mentor_response(mentor: MentorProfile) -> MentorProfileResponse:
    return MentorProfileResponse(
        user_id=mentor.user_id,
        username=mentor.user.username,
        expertise=list(mentor.expertise or []),
        current_mentees=mentor.current_mentees,
        max_mentees=mentor.max_mentees,
        average_rating=round(mentor.average_rating or 0.0, 2),
        review_count=mentor.review_count,
        reviews=[
            MentorReviewResponse(
                id=r.id,
                reviewer_username=r.reviewer.username if r.reviewer else "Anonymous",
                rating=r.rating,
                comment=r.comment,
                created_at=r.created_at,
            )
            for r in mentor.reviews
        ],
    )


def to_request_response(request: MentorshipRequest) -> MentorshipRequestResponse:
    review = request.resume_review
    return MentorshipRequestResponse(
        id=request.id,
        mentor_id=request.mentor_id,
        mentor_username=request.mentor.user.username,
        requester_id=request.requester_id,
        requester_username=request.requester.username,
        status=request.status,
        motivation=request.motivation,
        response_message=request.response_message,
        created_at=request.created_at,
        resume_review_id=review.id if review else None,
        review_status=review.status if review else None,
        conversation_id=review.conversation.id if review and review.conversation else None,
    )


def to_review_response(review: ResumeReview) -> ResumeReviewResponse:
    return ResumeReviewResponse(
        id=review.id,
        request_id=review.request_id,
        mentor_id=review.mentor_id,
        job_seeker_id=review.job_seeker_id,
        status=review.status,
        resume_url=review.resume_url,
        resume_uploaded_at=review.resume_uploaded_at,
        created_at=review.created_at,
        conversation_id=review.conversation.id if review.conversation else None,
    )


def get_mentor_entity(db: Session, user_id: int) -> MentorProfile:
    mentor = db.get(MentorProfile, user_id)
    if not mentor:
        raise AppError(ErrorCode.MENTOR_PROFILE_NOT_FOUND, "Mentor profile not found")
    return mentor


def get_request_entity(db: Session, request_id: int) -> MentorshipRequest:
    request = db.get(MentorshipRequest, request_id)
    if not request:
        raise AppError(ErrorCode.REQUEST_NOT_FOUND, "Mentorship request not found")
    return request


def get_resume_review_entity(db: Session, resume_review_id: int) -> ResumeReview:
    review = db.get(ResumeReview, resume_review_id)
    if not review:
        raise AppError(ErrorCode.RESUME_REVIEW_NOT_FOUND, "Resume review not found")
    return review


def _require_participant(review: ResumeReview, user: User) -> None:
    if user.id not in (review.mentor_id, review.job_seeker_id):
        raise AppError(ErrorCode.UNAUTHORIZED_REVIEW_ACCESS, "User is not authorized for this review")


# ============================================================
# MENTOR PROFILES
# ============================================================

def list_mentors(db: Session) -> List[MentorProfileResponse]:
    mentors = (
        db.query(MentorProfile)
        .join(User, MentorProfile.user_id == User.id)
        .filter(User.is_banned.is_(False), User.is_mentor_banned.is_(False))
        .order_by(MentorProfile.average_rating.desc(), MentorProfile.user_id)
        .all()
    )
    return [to_mentor_response(m) for m in mentors]


def create_mentor_profile(db: Session, user: User, request: MentorProfileCreate) -> MentorProfileResponse:
    if user.is_mentor_banned:
        raise AppError(ErrorCode.ACCESS_DENIED, f"You are banned from mentorship: {user.mentor_ban_reason or 'no reason given'}")
    if db.get(MentorProfile, user.id):
        raise AppError(ErrorCode.MENTOR_PROFILE_ALREADY_EXISTS, "Mentor profile already exists")

    mentor = MentorProfile(
        user_id=user.id,
        expertise=request.expertise,
        max_mentees=request.max_mentees,
        current_mentees=0,
        average_rating=0.0,
        review_count=0,
    )
    db.add(mentor)
    db.flush()
    badge_service.check_mentor_profile_badges(db, user.id)
    db.commit()
    logger.info("Mentor profile created", user_id=user.id, max_mentees=mentor.max_mentees)
    return to_mentor_response(mentor)


def get_mentor_profile(db: Session, user_id: int) -> MentorProfileResponse:
    return to_mentor_response(get_mentor_entity(db, user_id))


def update_mentor_profile(db: Session, user_id: int, user: User, request: MentorProfileUpdate) -> MentorProfileResponse:
    if user.id != user_id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only update your own mentor profile")
    mentor = get_mentor_entity(db, user_id)
    if request.max_mentees < mentor.current_mentees:
        raise AppError(ErrorCode.MENTEE_CAPACITY_CONFLICT, "Cannot set max mentees lower than current mentee count.")

    mentor.expertise = request.expertise
    mentor.max_mentees = request.max_mentees
    db.commit()
    return to_mentor_response(mentor)


def delete_mentor_profile(db: Session, user_id: int, user: User) -> None:
    if user.id != user_id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only delete your own mentor profile")
    mentor = get_mentor_entity(db, user_id)
    if mentor.current_mentees > 0:
        raise AppError(
            ErrorCode.ACTIVE_MENTORSHIP_EXIST,
            "Please complete or close all active mentorship before deleting your profile.",
        )
    db.delete(mentor)
    db.commit()
    logger.info("Mentor profile deleted", user_id=user_id)


# ============================================================
# REQUESTS
# ============================================================

def create_request(db: Session, requester: User, request: MentorshipRequestCreate) -> MentorshipRequestResponse:
    mentor = get_mentor_entity(db, request.mentor_id)
    if mentor.user_id == requester.id:
        raise AppError(ErrorCode.BAD_REQUEST, "You cannot request mentorship from yourself")
    if mentor.user.is_mentor_banned or mentor.user.is_banned or not mentor.can_accept():
        raise AppError(ErrorCode.MENTOR_UNAVAILABLE, "Mentor is unavailable")

    pending = db.query(MentorshipRequest.id).filter(
        MentorshipRequest.mentor_id == mentor.user_id,
        MentorshipRequest.requester_id == requester.id,
        MentorshipRequest.status == MentorshipRequestStatus.PENDING,
    ).first()
    if pending:
        raise AppError(ErrorCode.BAD_REQUEST, "You already have a pending request to this mentor")

    entity = MentorshipRequest(
        mentor_id=mentor.user_id,
        requester_id=requester.id,
        status=MentorshipRequestStatus.PENDING,
        motivation=request.motivation,
    )
    db.add(entity)
    db.flush()

    notify_user(
        db, mentor.user_id,
        title="New mentorship request",
        notification_type=NotificationType.MENTORSHIP_REQUEST,
        message=f"{requester.username} asked you to be their mentor",
        link_id=entity.id,
    )
    badge_service.check_mentorship_request_badges(db, requester.id)
    db.commit()
    logger.info("Mentorship request created", request_id=entity.id, mentor_id=mentor.user_id, requester_id=requester.id)
    return to_request_response(entity)


def list_requests_of_mentor(db: Session, mentor_id: int, user: User) -> List[MentorshipRequestResponse]:
    if user.id != mentor_id:
        raise AppError(ErrorCode.ACCESS_DENIED, "User not allowed to access requests.")
    get_mentor_entity(db, mentor_id)
    requests = (
        db.query(MentorshipRequest)
        .filter(MentorshipRequest.mentor_id == mentor_id)
        .order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc())
        .all()
    )
    return [to_request_response(r) for r in requests]


def list_requests_of_mentee(db: Session, mentee_id: int, user: User) -> List[MentorshipRequestResponse]:
    if user.id != mentee_id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You are not authorized to view another user's requests.")
    requests = (
        db.query(MentorshipRequest)
        .filter(MentorshipRequest.requester_id == mentee_id)
        .order_by(MentorshipRequest.created_at.desc(), MentorshipRequest.id.desc())
        .all()
    )
    return [to_request_response(r) for r in requests]


def get_request(db: Session, request_id: int, user: User) -> MentorshipRequestResponse:
    request = get_request_entity(db, request_id)
    if user.id not in (request.mentor_id, request.requester_id):
        raise AppError(ErrorCode.UNAUTHORIZED_REVIEW_ACCESS, "User is not authorized to see this request")
    return to_request_response(request)


def respond_to_request(db: Session, request_id: int, user: User,
                       response: MentorshipRespondRequest) -> MentorshipRequestResponse:
    request = get_request_entity(db, request_id)
    if request.mentor_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "Forbidden to access this request")
    if request.status != MentorshipRequestStatus.PENDING:
        raise AppError(ErrorCode.REQUEST_ALREADY_PROCESSED, "This request has already been responded to.")

    request.response_message = response.response_message
    request.responded_at = datetime.utcnow()

    if response.accept:
        mentor = request.mentor
        if not mentor.can_accept():
            raise AppError(ErrorCode.MENTOR_UNAVAILABLE, "You have no free mentee slots")

        request.status = MentorshipRequestStatus.ACCEPTED
        review = ResumeReview(
            request_id=request.id,
            mentor_id=mentor.user_id,
            job_seeker_id=request.requester_id,
            status=ResumeReviewStatus.ACTIVE,
        )
        db.add(review)
        db.flush()
        chat_service.create_conversation_for_review(db, review)
        mentor.current_mentees += 1
        db.flush()

        notify_user(
            db, request.requester_id,
            title="Mentorship accepted",
            notification_type=NotificationType.MENTORSHIP_ACCEPTED,
            message=f"{user.username} accepted your mentorship request",
            link_id=review.id,
        )
        badge_service.check_mentor_accepted_badges(db, mentor.user_id)
        badge_service.check_mentee_accepted_badges(db, request.requester_id)
    else:
        request.status = MentorshipRequestStatus.REJECTED
        notify_user(
            db, request.requester_id,
            title="Mentorship declined",
            notification_type=NotificationType.MENTORSHIP_REJECTED,
            message=f"{user.username} declined your mentorship request",
            link_id=request.id,
        )

    db.commit()
    db.refresh(request)
    logger.info("Mentorship request answered", request_id=request.id, status=request.status.value)
    return to_request_response(request)


def cancel_request(db: Session, request_id: int, user: User) -> MentorshipRequestResponse:
    request = get_request_entity(db, request_id)
    if request.requester_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only cancel your own requests")
    if request.status != MentorshipRequestStatus.PENDING:
        raise AppError(ErrorCode.REQUEST_ALREADY_PROCESSED, "This request has already been responded to.")
    request.status = MentorshipRequestStatus.CANCELLED
    db.commit()
    logger.info("Mentorship request cancelled", request_id=request.id)
    return to_request_response(request)


# ============================================================
# RESUME REVIEWS
# ============================================================

def get_resume_review(db: Session, resume_review_id: int, user: User) -> ResumeReviewResponse:
    review = get_resume_review_entity(db, resume_review_id)
    _require_participant(review, user)
    return to_review_response(review)


async def upload_resume_file(db: Session, resume_review_id: int, user: User, file: UploadFile) -> ResumeFileResponse:
    review = get_resume_review_entity(db, resume_review_id)
    _require_participant(review, user)
    url, _ = await save_pdf(file, "resumes")
    if review.resume_url:
        delete_stored_file(review.resume_url)
    review.resume_url = url
    review.resume_uploaded_at = datetime.utcnow()
    db.commit()
    return ResumeFileResponse(resume_review_id=review.id, resume_url=url, uploaded_at=review.resume_uploaded_at)


def get_resume_file(db: Session, resume_review_id: int, user: User) -> ResumeFileResponse:
    review = get_resume_review_entity(db, resume_review_id)
    _require_participant(review, user)
    if not review.resume_url:
        raise AppError(ErrorCode.RESUME_FILE_NOT_FOUND, "Resume file not uploaded yet")
    return ResumeFileResponse(
        resume_review_id=review.id, resume_url=review.resume_url, uploaded_at=review.resume_uploaded_at,
    )


def _decrement_mentor_count(mentor: MentorProfile) -> None:
    if mentor.current_mentees > 0:
        mentor.current_mentees -= 1


def _finish(db: Session, resume_review_id: int, user: User, review_status: ResumeReviewStatus,
            request_status: MentorshipRequestStatus, system_message: str) -> ResumeReviewResponse:
    review = get_resume_review_entity(db, resume_review_id)
    _require_participant(review, user)
    if review.status != ResumeReviewStatus.ACTIVE:
        raise AppError(ErrorCode.MENTORSHIP_NOT_ACTIVE, "This mentorship is not active.")

    review.status = review_status
    review.request.status = request_status
    chat_service.close_conversation(db, review, system_message)
    _decrement_mentor_count(review.mentor)
    db.commit()
    logger.info("Mentorship finished", resume_review_id=review.id, status=review_status.value, by=user.id)
    return to_review_response(review)


def complete_mentorship(db: Session, resume_review_id: int, user: User) -> ResumeReviewResponse:
    return _finish(
        db, resume_review_id, user,
        ResumeReviewStatus.COMPLETED, MentorshipRequestStatus.COMPLETED,
        f"This mentorship has been marked as completed by {user.username}.",
    )


def close_mentorship(db: Session, resume_review_id: int, user: User) -> ResumeReviewResponse:
    return _finish(
        db, resume_review_id, user,
        ResumeReviewStatus.CLOSED, MentorshipRequestStatus.CLOSED,
        f"This mentorship has been closed by {user.username}.",
    )


def rate_mentor(db: Session, user: User, request: RatingCreate) -> MentorProfileResponse:
    review = get_resume_review_entity(db, request.resume_review_id)
    if review.job_seeker_id != user.id:
        raise AppError(ErrorCode.UNAUTHORIZED_REVIEW_ACCESS, "You can only rate reviews you participated in.")
    if review.status != ResumeReviewStatus.COMPLETED:
        raise AppError(ErrorCode.BAD_REQUEST, "Cannot rate an incomplete review.")

    mentor = review.mentor
    already = db.query(MentorReview.id).filter(
        MentorReview.mentor_id == mentor.user_id, MentorReview.reviewer_id == user.id
    ).first()
    if already:
        raise AppError(ErrorCode.REVIEW_ALREADY_EXISTS, "You have already rated this mentor")

    db.add(MentorReview(
        mentor_id=mentor.user_id,
        reviewer_id=user.id,
        resume_review_id=review.id,
        rating=request.rating,
        comment=request.comment,
    ))
    mentor.record_rating(request.rating)
    db.flush()
    badge_service.check_mentor_rating_badges(db, user.id)
    db.commit()
    logger.info("Mentor rated", mentor_id=mentor.user_id, rating=request.rating, average=mentor.average_rating)
    return to_mentor_response(mentor)
