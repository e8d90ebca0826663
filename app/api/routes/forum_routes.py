"""
Forum Routes

POST /forum/posts - Create post
GET /forum/posts - List posts (newest first, optional tag filter)
GET /forum/posts/{post_id} - Get post with comments
PUT /forum/posts/{post_id} - Update post (author)
DELETE /forum/posts/{post_id} - Delete post (author or admin)
POST /forum/posts/{post_id}/comments - Comment on a post (rate limited)
PUT /forum/comments/{comment_id} - Update comment (author)
DELETE /forum/comments/{comment_id} - Delete comment (author or admin)
POST|DELETE /forum/posts/{post_id}/upvote|downvote - Vote on a post
POST|DELETE /forum/comments/{comment_id}/upvote|downvote - Vote on a comment
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user, get_optional_user
from app.db.postgres import get_db
from app.models import User
from app.models.enums import VoteType
from app.schemas.schemas import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    MessageResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from app.services import forum_service
from app.services.rate_limit import CommentRateLimiter

router = APIRouter(prefix="/forum", tags=["Forum"])


def get_comment_rate_limiter() -> CommentRateLimiter:
    """Dependency - limiter built from settings."""
    return CommentRateLimiter()


# ============================================================
# POSTS
# ============================================================

@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(data: PostCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.create_post(db, user, data)


@router.get("/posts", response_model=List[PostResponse])
async def list_posts(
    tag: Optional[str] = None,
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return forum_service.list_posts(db, viewer, tag=tag)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, viewer: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    """Post with its comments. Vote flags reflect the caller when logged in."""
    return forum_service.get_post(db, post_id, viewer)


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(post_id: int, data: PostUpdate,
                      user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.update_post(db, post_id, user, data)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    forum_service.delete_post(db, post_id, user)
    return MessageResponse(message="Post deleted")


# ============================================================
# COMMENTS
# ============================================================

@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    user: User = Depends(get_current_user),
    limiter: CommentRateLimiter = Depends(get_comment_rate_limiter),
    db: Session = Depends(get_db),
):
    return forum_service.create_comment(db, post_id, user, data, limiter=limiter)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(comment_id: int, data: CommentUpdate,
                         user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.update_comment(db, comment_id, user, data.content)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(comment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    forum_service.delete_comment(db, comment_id, user)
    return MessageResponse(message="Comment deleted")


# ============================================================
# VOTES
# ============================================================

@router.post("/posts/{post_id}/upvote", response_model=PostResponse)
async def upvote_post(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.vote_post(db, post_id, user, VoteType.UPVOTE)


@router.post("/posts/{post_id}/downvote", response_model=PostResponse)
async def downvote_post(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.vote_post(db, post_id, user, VoteType.DOWNVOTE)


@router.delete("/posts/{post_id}/upvote", response_model=PostResponse)
async def remove_post_upvote(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.unvote_post(db, post_id, user, VoteType.UPVOTE)


@router.delete("/posts/{post_id}/downvote", response_model=PostResponse)
async def remove_post_downvote(post_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.unvote_post(db, post_id, user, VoteType.DOWNVOTE)


@router.post("/comments/{comment_id}/upvote", response_model=CommentResponse)
async def upvote_comment(comment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.vote_comment(db, comment_id, user, VoteType.UPVOTE)


@router.post("/comments/{comment_id}/downvote", response_model=CommentResponse)
async def downvote_comment(comment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.vote_comment(db, comment_id, user, VoteType.DOWNVOTE)


@router.delete("/comments/{comment_id}/upvote", response_model=CommentResponse)
async def remove_comment_upvote(comment_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return forum_service.unvote_comment(db, comment_id, user, VoteType.UPVOTE)


@router.delete("/comments/{comment_id}/downvote", response_model=CommentResponse)
async def remove_comment_downvote(comment_id: int, user: User = Depends(get_current_user),
                                  db: Session = Depends(get_db)):
    return forum_service.unvote_comment(db, comment_id, user, VoteType.DOWNVOTE)
