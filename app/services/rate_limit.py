"""
Forum comment rate limiting.

Sliding window over stored comments: an author may write at most ``limit``
comments on one post within the trailing ``window_minutes``. The comment
table itself is the window, so the limit holds across workers.
"""

from datetime import datetime, timedelta
from typing import NamedTuple, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import AppError, ErrorCode
from app.models import ForumComment

logger = structlog.get_logger()


class RateLimitResult(NamedTuple):
    """Result of a rate limit check."""

    allowed: bool
    remaining: int
    limit: int


class CommentRateLimiter:
    def __init__(self, limit: Optional[int] = None, window_minutes: Optional[int] = None):
        settings = get_settings()
        self.limit = limit if limit is not None else settings.comment_rate_limit
        self.window_minutes = window_minutes if window_minutes is not None else settings.comment_rate_window_minutes

    def check(self, db: Session, author_id: int, post_id: int, now: Optional[datetime] = None) -> RateLimitResult:
        since = (now or datetime.utcnow()) - timedelta(minutes=self.window_minutes)
        used = (
            db.query(func.count(ForumComment.id))
            .filter(
                ForumComment.author_id == author_id,
                ForumComment.post_id == post_id,
                ForumComment.created_at >= since,
            )
            .scalar()
        )
        return RateLimitResult(allowed=used < self.limit, remaining=max(0, self.limit - used), limit=self.limit)

    def enforce(self, db: Session, author_id: int, post_id: int) -> None:
        result = self.check(db, author_id, post_id)
        if not result.allowed:
            logger.warning("Comment rate limit hit", author_id=author_id, post_id=post_id, limit=result.limit)
            raise AppError(
                ErrorCode.RATE_LIMITED,
                f"You can post at most {self.limit} comments per post every {self.window_minutes} minutes",
            )
