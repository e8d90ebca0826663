"""
Workplace Review Service

Reviews rate a workplace overall and per declared ethical policy. The
overall rating of a review with policy ratings is their mean, clamped to
1..5 and rounded to one decimal.
"""

import math
from typing import Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from app.core.auth import is_admin
from app.core.exceptions import AppError, ErrorCode
from app.models import ReviewHelpful, ReviewPolicyRating, ReviewReply, User, Workplace, WorkplaceReview
from app.models.enums import EthicalPolicy
from app.schemas.schemas import (
    PaginatedResponse,
    ReplyResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
)
from app.services.workplace_service import (
    get_workplace_entity,
    is_workplace_employer,
    round_rating,
)

logger = structlog.get_logger()

REVIEW_SORTS = ("newest", "rating_desc", "rating_asc", "helpful")
ANONYMOUS_NAME = "Anonymous"


def compute_overall(scores: List[int]) -> float:
    mean = sum(scores) / len(scores)
    return round(min(5.0, max(1.0, mean)), 1)


def _parse_policy_ratings(workplace: Workplace, ratings: Dict[str, int]) -> Dict[EthicalPolicy, int]:
    declared = set(workplace.policies)
    parsed = {}
    for key, score in ratings.items():
        try:
            policy = EthicalPolicy.from_label(key)
        except ValueError:
            raise AppError(ErrorCode.VALIDATION_ERROR, f"Unknown ethical policy: {key}")
        if policy not in declared:
            raise AppError(ErrorCode.VALIDATION_ERROR, f"Policy '{policy.label}' is not declared by this workplace")
        parsed[policy] = score
    return parsed


def _parse_rating_filter(raw: str) -> List[float]:
    values = []
    for part in raw.split(","):
        if not part.strip():
            continue
        try:
            value = float(part)
        except ValueError:
            raise AppError(ErrorCode.BAD_REQUEST, "rating_filter must be a comma separated list of ratings")
        values.append(round(min(5.0, max(1.0, value)), 1))
    return values


def _matches_rating(overall: float, wanted: List[float]) -> bool:
    # Whole numbers select a star bucket (4 matches 4.0 to 4.9), fractions match exactly
    for value in wanted:
        if value.is_integer():
            if math.floor(overall) == value:
                return True
        elif round(overall, 1) == value:
            return True
    return False


def get_review_entity(db: Session, workplace_id: int, review_id: int) -> WorkplaceReview:
    review = db.get(WorkplaceReview, review_id)
    if not review or review.workplace_id != workplace_id:
        raise AppError(ErrorCode.REVIEW_NOT_FOUND, "Review not found")
    return review


def to_reply_response(reply: ReviewReply) -> ReplyResponse:
    return ReplyResponse(
        id=reply.id,
        review_id=reply.review_id,
        employer_user_id=reply.employer_user_id,
        employer_username=reply.employer_user.username,
        workplace_name=reply.review.workplace.company_name,
        content=reply.content,
        created_at=reply.created_at,
        updated_at=reply.updated_at,
    )


def to_review_response(db: Session, review: WorkplaceReview, viewer: Optional[User] = None) -> ReviewResponse:
    helpful_by_user = False
    if viewer is not None:
        helpful_by_user = db.query(ReviewHelpful.id).filter(
            ReviewHelpful.review_id == review.id, ReviewHelpful.user_id == viewer.id
        ).first() is not None

    return ReviewResponse(
        id=review.id,
        workplace_id=review.workplace_id,
        user_id=None if review.anonymous else review.user_id,
        username=ANONYMOUS_NAME if review.anonymous else review.user.username,
        title=review.title,
        content=review.content,
        anonymous=review.anonymous,
        overall_rating=review.overall_rating,
        policy_ratings={r.policy.value: r.score for r in review.policy_ratings},
        helpful_count=review.helpful_count,
        helpful_by_user=helpful_by_user,
        reply=to_reply_response(review.reply) if review.reply else None,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


# ============================================================
# REVIEWS
# ============================================================

def create_review(db: Session, workplace_id: int, user: User, request: ReviewCreate) -> ReviewResponse:
    workplace = get_workplace_entity(db, workplace_id)
    if is_workplace_employer(db, workplace_id, user.id):
        raise AppError(ErrorCode.ACCESS_DENIED, "Employers cannot review their own workplace")

    exists = db.query(WorkplaceReview.id).filter(
        WorkplaceReview.workplace_id == workplace_id, WorkplaceReview.user_id == user.id
    ).first()
    if exists:
        raise AppError(ErrorCode.REVIEW_ALREADY_EXISTS, "You have already reviewed this workplace")

    ratings = _parse_policy_ratings(workplace, request.policy_ratings)
    overall = compute_overall(list(ratings.values())) if ratings else round(request.overall_rating, 1)

    review = WorkplaceReview(
        workplace_id=workplace_id,
        user_id=user.id,
        title=request.title,
        content=request.content,
        anonymous=request.anonymous,
        overall_rating=overall,
    )
    review.policy_ratings = [ReviewPolicyRating(policy=p, score=s) for p, s in ratings.items()]
    db.add(review)
    workplace.review_count = (workplace.review_count or 0) + 1
    db.commit()
    logger.info("Workplace review created", workplace_id=workplace_id, review_id=review.id, overall=overall)
    return to_review_response(db, review, user)


def list_reviews(
    db: Session,
    workplace_id: int,
    viewer: Optional[User] = None,
    page: int = 0,
    size: int = 10,
    rating_filter: Optional[str] = None,
    has_comment: Optional[bool] = None,
    policy: Optional[str] = None,
    sort_by: str = "newest",
) -> PaginatedResponse[ReviewResponse]:
    get_workplace_entity(db, workplace_id)
    reviews = db.query(WorkplaceReview).filter(WorkplaceReview.workplace_id == workplace_id).all()

    if rating_filter:
        ratings = _parse_rating_filter(rating_filter)
        reviews = [r for r in reviews if _matches_rating(r.overall_rating, ratings)]

    if has_comment is not None:
        reviews = [r for r in reviews if bool(r.content and r.content.strip()) == has_comment]

    if policy:
        try:
            wanted = EthicalPolicy.from_label(policy)
        except ValueError:
            raise AppError(ErrorCode.BAD_REQUEST, f"Unknown ethical policy: {policy}")
        reviews = [r for r in reviews if any(pr.policy == wanted for pr in r.policy_ratings)]

    if sort_by not in REVIEW_SORTS:
        raise AppError(ErrorCode.BAD_REQUEST, f"sort_by must be one of {', '.join(REVIEW_SORTS)}")
    if sort_by == "rating_desc":
        reviews.sort(key=lambda r: (r.overall_rating, r.created_at), reverse=True)
    elif sort_by == "rating_asc":
        reviews.sort(key=lambda r: (r.overall_rating, r.created_at))
    elif sort_by == "helpful":
        reviews.sort(key=lambda r: (r.helpful_count, r.created_at), reverse=True)
    else:
        reviews.sort(key=lambda r: (r.created_at, r.id), reverse=True)

    total = len(reviews)
    window = reviews[page * size:(page + 1) * size]
    return PaginatedResponse[ReviewResponse](
        content=[to_review_response(db, r, viewer) for r in window],
        page=page,
        size=size,
        total_elements=total,
        total_pages=math.ceil(total / size) if size else 0,
    )


def get_review(db: Session, workplace_id: int, review_id: int, viewer: Optional[User] = None) -> ReviewResponse:
    get_workplace_entity(db, workplace_id)
    return to_review_response(db, get_review_entity(db, workplace_id, review_id), viewer)


def update_review(db: Session, workplace_id: int, review_id: int, user: User, request: ReviewUpdate) -> ReviewResponse:
    workplace = get_workplace_entity(db, workplace_id)
    review = get_review_entity(db, workplace_id, review_id)
    if review.user_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only edit your own review")

    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise AppError(ErrorCode.VALIDATION_ERROR, "No changes provided")

    for key in ("title", "content", "anonymous"):
        if key in changes and changes[key] is not None:
            setattr(review, key, changes[key])

    if request.policy_ratings:
        existing = {r.policy: r for r in review.policy_ratings}
        for policy, score in _parse_policy_ratings(workplace, request.policy_ratings).items():
            if policy in existing:
                existing[policy].score = score
            else:
                review.policy_ratings.append(ReviewPolicyRating(policy=policy, score=score))

    if review.policy_ratings:
        review.overall_rating = compute_overall([r.score for r in review.policy_ratings])
    elif request.overall_rating is not None:
        review.overall_rating = round(request.overall_rating, 1)

    db.commit()
    logger.info("Workplace review updated", review_id=review_id, overall=review.overall_rating)
    return to_review_response(db, review, user)


def remove_review(db: Session, review: WorkplaceReview, reason: str) -> None:
    """Delete a review and keep the workplace's review_count in step."""
    workplace = db.get(Workplace, review.workplace_id)
    if workplace and workplace.review_count > 0:
        workplace.review_count -= 1
    db.delete(review)
    logger.info("Workplace review deleted", review_id=review.id, reason=reason)


def delete_review(db: Session, workplace_id: int, review_id: int, user: User) -> None:
    get_workplace_entity(db, workplace_id)
    review = get_review_entity(db, workplace_id, review_id)
    if review.user_id != user.id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only delete your own review")
    remove_review(db, review, reason=f"Deleted by user {user.id}")
    db.commit()


def toggle_helpful(db: Session, workplace_id: int, review_id: int, user: User) -> ReviewResponse:
    get_workplace_entity(db, workplace_id)
    review = get_review_entity(db, workplace_id, review_id)

    mark = db.query(ReviewHelpful).filter(
        ReviewHelpful.review_id == review_id, ReviewHelpful.user_id == user.id
    ).first()
    if mark:
        db.delete(mark)
        review.helpful_count = max(0, review.helpful_count - 1)
    else:
        db.add(ReviewHelpful(review_id=review_id, user_id=user.id))
        review.helpful_count += 1
    db.commit()
    return to_review_response(db, review, user)


# ============================================================
# REPLIES
# ============================================================

def _require_reply_permission(db: Session, workplace_id: int, user: User) -> None:
    if not is_admin(user) and not is_workplace_employer(db, workplace_id, user.id):
        raise AppError(ErrorCode.WORKPLACE_UNAUTHORIZED, "Only employers of this workplace can reply")


def _get_reply_entity(review: WorkplaceReview) -> ReviewReply:
    if not review.reply:
        raise AppError(ErrorCode.REPLY_NOT_FOUND, "Reply not found")
    return review.reply


def get_reply(db: Session, workplace_id: int, review_id: int) -> ReplyResponse:
    get_workplace_entity(db, workplace_id)
    return to_reply_response(_get_reply_entity(get_review_entity(db, workplace_id, review_id)))


def create_reply(db: Session, workplace_id: int, review_id: int, user: User, content: str) -> ReplyResponse:
    get_workplace_entity(db, workplace_id)
    review = get_review_entity(db, workplace_id, review_id)
    _require_reply_permission(db, workplace_id, user)
    if review.reply:
        raise AppError(ErrorCode.REPLY_ALREADY_EXISTS, "This review already has a reply")

    reply = ReviewReply(review_id=review.id, employer_user_id=user.id, content=content)
    db.add(reply)
    db.commit()
    db.refresh(review)
    logger.info("Review reply created", review_id=review_id, reply_id=reply.id)
    return to_reply_response(reply)


def update_reply(db: Session, workplace_id: int, review_id: int, user: User, content: str) -> ReplyResponse:
    get_workplace_entity(db, workplace_id)
    reply = _get_reply_entity(get_review_entity(db, workplace_id, review_id))
    _require_reply_permission(db, workplace_id, user)
    reply.content = content
    db.commit()
    return to_reply_response(reply)


def delete_reply(db: Session, workplace_id: int, review_id: int, user: User) -> None:
    get_workplace_entity(db, workplace_id)
    reply = _get_reply_entity(get_review_entity(db, workplace_id, review_id))
    _require_reply_permission(db, workplace_id, user)
    db.delete(reply)
    db.commit()
    logger.info("Review reply deleted", review_id=review_id)
