"""
Forum Service

Posts, threaded comments and up/down votes. A user holds at most one vote
per post and per comment; voting the other way replaces the vote.
"""

from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from app.core.auth import is_admin
from app.core.exceptions import AppError, ErrorCode
from app.models import CommentVote, ForumComment, ForumPost, PostVote, User
from app.models.enums import VoteType
from app.schemas.schemas import (
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from app.services import badge_service
from app.services.rate_limit import CommentRateLimiter

logger = structlog.get_logger()


def _count(votes, vote_type: VoteType) -> int:
    return sum(1 for v in votes if v.vote_type == vote_type)


def to_comment_response(comment: ForumComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        author_username=comment.author.username,
        parent_comment_id=comment.parent_comment_id,
        content=comment.content,
        upvote_count=_count(comment.votes, VoteType.UPVOTE),
        downvote_count=_count(comment.votes, VoteType.DOWNVOTE),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def to_post_response(post: ForumPost, viewer: Optional[User] = None, with_comments: bool = True) -> PostResponse:
    viewer_vote = None
    if viewer is not None:
        viewer_vote = next((v.vote_type for v in post.votes if v.user_id == viewer.id), None)

    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        tags=list(post.tags or []),
        author_id=post.author_id,
        author_username=post.author.username,
        upvote_count=_count(post.votes, VoteType.UPVOTE),
        downvote_count=_count(post.votes, VoteType.DOWNVOTE),
        comment_count=len(post.comments),
        comments=[to_comment_response(c) for c in post.comments] if with_comments else [],
        has_user_upvoted=viewer_vote == VoteType.UPVOTE,
        has_user_downvoted=viewer_vote == VoteType.DOWNVOTE,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def get_post_entity(db: Session, post_id: int) -> ForumPost:
    post = db.get(ForumPost, post_id)
    if not post:
        raise AppError(ErrorCode.POST_NOT_FOUND, "Post not found")
    return post


def get_comment_entity(db: Session, comment_id: int) -> ForumComment:
    comment = db.get(ForumComment, comment_id)
    if not comment:
        raise AppError(ErrorCode.COMMENT_NOT_FOUND, "Comment not found")
    return comment


# ============================================================
# POSTS
# ============================================================

def create_post(db: Session, author: User, request: PostCreate) -> PostResponse:
    post = ForumPost(author_id=author.id, title=request.title, content=request.content, tags=request.tags)
    db.add(post)
    db.flush()
    badge_service.check_forum_post_badges(db, author.id)
    db.commit()
    logger.info("Forum post created", post_id=post.id, author_id=author.id)
    return to_post_response(post, author)


def list_posts(db: Session, viewer: Optional[User] = None, tag: Optional[str] = None) -> List[PostResponse]:
    posts = db.query(ForumPost).order_by(ForumPost.created_at.desc(), ForumPost.id.desc()).all()
    if tag:
        wanted = tag.lower()
        posts = [p for p in posts if any(t.lower() == wanted for t in (p.tags or []))]
    return [to_post_response(p, viewer, with_comments=False) for p in posts]


def get_post(db: Session, post_id: int, viewer: Optional[User] = None) -> PostResponse:
    return to_post_response(get_post_entity(db, post_id), viewer)


def update_post(db: Session, post_id: int, user: User, request: PostUpdate) -> PostResponse:
    post = get_post_entity(db, post_id)
    if post.author_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only edit your own posts")
    changes = request.model_dump(exclude_unset=True)
    if not changes:
        raise AppError(ErrorCode.VALIDATION_ERROR, "No changes provided")
    cleared = [key for key, value in changes.items() if value is None]
    if cleared:
        raise AppError(ErrorCode.VALIDATION_ERROR, f"{', '.join(cleared)} cannot be null")
    for key, value in changes.items():
        setattr(post, key, value)
    db.commit()
    return to_post_response(post, user)


def remove_post(db: Session, post: ForumPost, reason: str) -> None:
    db.delete(post)
    logger.info("Forum post deleted", post_id=post.id, reason=reason)


def delete_post(db: Session, post_id: int, user: User) -> None:
    post = get_post_entity(db, post_id)
    if post.author_id != user.id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only delete your own posts")
    remove_post(db, post, reason=f"Deleted by user {user.id}")
    db.commit()


# ============================================================
# COMMENTS
# ============================================================

def create_comment(db: Session, post_id: int, author: User, request: CommentCreate,
                   limiter: Optional[CommentRateLimiter] = None) -> CommentResponse:
    post = get_post_entity(db, post_id)
    if request.parent_comment_id is not None:
        parent = db.get(ForumComment, request.parent_comment_id)
        if not parent or parent.post_id != post.id:
            raise AppError(ErrorCode.COMMENT_NOT_FOUND, "Parent comment not found on this post")

    (limiter or CommentRateLimiter()).enforce(db, author.id, post.id)

    comment = ForumComment(
        post_id=post.id,
        author_id=author.id,
        parent_comment_id=request.parent_comment_id,
        content=request.content,
    )
    db.add(comment)
    db.flush()
    badge_service.check_forum_comment_badges(db, author.id)
    db.commit()
    logger.info("Forum comment created", comment_id=comment.id, post_id=post.id, author_id=author.id)
    return to_comment_response(comment)


def update_comment(db: Session, comment_id: int, user: User, content: str) -> CommentResponse:
    comment = get_comment_entity(db, comment_id)
    if comment.author_id != user.id:
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only edit your own comments")
    comment.content = content
    db.commit()
    return to_comment_response(comment)


def remove_comment(db: Session, comment: ForumComment, reason: str) -> None:
    db.delete(comment)
    logger.info("Forum comment deleted", comment_id=comment.id, reason=reason)


def delete_comment(db: Session, comment_id: int, user: User) -> None:
    comment = get_comment_entity(db, comment_id)
    if comment.author_id != user.id and not is_admin(user):
        raise AppError(ErrorCode.ACCESS_DENIED, "You can only delete your own comments")
    remove_comment(db, comment, reason=f"Deleted by user {user.id}")
    db.commit()


# ============================================================
# VOTES
# ============================================================

def _cast_vote(db: Session, model, target_field: str, target_id: int, user_id: int, vote_type: VoteType):
    """Upsert the user's single vote on a target. Returns True when it changed."""
    vote = db.query(model).filter(
        getattr(model, target_field) == target_id, model.user_id == user_id
    ).first()
    if vote is None:
        db.add(model(**{target_field: target_id, "user_id": user_id, "vote_type": vote_type}))
        return True
    if vote.vote_type != vote_type:
        vote.vote_type = vote_type
        return True
    return False


def _remove_vote(db: Session, model, target_field: str, target_id: int, user_id: int, vote_type: VoteType) -> None:
    vote = db.query(model).filter(
        getattr(model, target_field) == target_id,
        model.user_id == user_id,
        model.vote_type == vote_type,
    ).first()
    if vote is not None:
        db.delete(vote)


def vote_post(db: Session, post_id: int, user: User, vote_type: VoteType) -> PostResponse:
    post = get_post_entity(db, post_id)
    _cast_vote(db, PostVote, "post_id", post.id, user.id, vote_type)
    db.commit()
    db.refresh(post)
    return to_post_response(post, user)


def unvote_post(db: Session, post_id: int, user: User, vote_type: VoteType) -> PostResponse:
    post = get_post_entity(db, post_id)
    _remove_vote(db, PostVote, "post_id", post.id, user.id, vote_type)
    db.commit()
    db.refresh(post)
    return to_post_response(post, user)


def vote_comment(db: Session, comment_id: int, user: User, vote_type: VoteType) -> CommentResponse:
    comment = get_comment_entity(db, comment_id)
    changed = _cast_vote(db, CommentVote, "comment_id", comment.id, user.id, vote_type)
    db.flush()
    if changed and vote_type == VoteType.UPVOTE:
        badge_service.check_comment_upvote_badges(db, comment.author_id)
    db.commit()
    db.refresh(comment)
    return to_comment_response(comment)


def unvote_comment(db: Session, comment_id: int, user: User, vote_type: VoteType) -> CommentResponse:
    comment = get_comment_entity(db, comment_id)
    _remove_vote(db, CommentVote, "comment_id", comment.id, user.id, vote_type)
    db.commit()
    db.refresh(comment)
    return to_comment_response(comment)
