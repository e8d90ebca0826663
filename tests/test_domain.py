"""Unit tests for domain helpers that need no HTTP round trip."""

from datetime import datetime, timedelta

import pytest

from app.core.exceptions import AppError, ErrorCode
from app.models.enums import BadgeCriteria, BadgeType, EthicalPolicy
from app.services.review_service import compute_overall

pytestmark = [pytest.mark.unit]


class TestComputeOverall:
    def test_mean_rounded_to_one_decimal(self):
        assert compute_overall([5, 4, 4]) == 4.3

    def test_single_score(self):
        assert compute_overall([2]) == 2.0

    def test_clamped_to_range(self):
        assert compute_overall([1, 1]) == 1.0
        assert compute_overall([5, 5]) == 5.0


class TestEthicalPolicy:
    @pytest.mark.parametrize("value", ["REMOTE_FRIENDLY", "remote_friendly", "Remote-Friendly", " remote-friendly "])
    def test_from_label_accepts_name_or_label(self, value):
        assert EthicalPolicy.from_label(value) is EthicalPolicy.REMOTE_FRIENDLY

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            EthicalPolicy.from_label("Free Snacks")


class TestBadgeCatalogue:
    def test_every_criteria_has_a_first_badge(self):
        for criteria in BadgeCriteria:
            thresholds = [b.threshold for b in BadgeType.for_criteria(criteria)]
            assert thresholds and min(thresholds) == 1

    def test_display_name(self):
        assert BadgeType.HIRED.display_name == "Hired!"


class TestErrorCodes:
    @pytest.mark.parametrize("code, status", [
        (ErrorCode.USER_UNAUTHORIZED, 401),
        (ErrorCode.WORKPLACE_UNAUTHORIZED, 403),
        (ErrorCode.PROFILE_NOT_FOUND, 404),
        (ErrorCode.REVIEW_ALREADY_EXISTS, 409),
        (ErrorCode.EMPLOYER_ALREADY_ASSIGNED, 409),
        (ErrorCode.RATE_LIMITED, 429),
        (ErrorCode.IMAGE_UPLOAD_FAILED, 500),
        (ErrorCode.MENTOR_UNAVAILABLE, 400),
    ])
    def test_status(self, code, status):
        assert code.status == status

    def test_app_error_carries_status(self):
        error = AppError(ErrorCode.POST_NOT_FOUND, "Post not found")

        assert error.status_code == 404
        assert error.message == "Post not found"


class TestMentorRating:
    def test_running_average(self):
        from app.models import MentorProfile

        mentor = MentorProfile(user_id=1, expertise=[], max_mentees=2, current_mentees=0,
                               average_rating=0.0, review_count=0)
        mentor.record_rating(5)
        mentor.record_rating(2)

        assert mentor.review_count == 2
        assert mentor.average_rating == 3.5

    def test_capacity(self):
        from app.models import MentorProfile

        mentor = MentorProfile(user_id=1, expertise=[], max_mentees=1, current_mentees=1,
                               average_rating=0.0, review_count=0)
        assert mentor.can_accept() is False


class TestCommentRateLimiter:
    @pytest.fixture
    def thread(self, db_session):
        from app.models import ForumPost, User
        from app.models.enums import Role

        user = User(username="alice", email="alice@example.com", password_hash="x", role=Role.ROLE_JOBSEEKER)
        db_session.add(user)
        db_session.flush()
        post = ForumPost(author_id=user.id, title="Thread", content="Body", tags=[])
        db_session.add(post)
        db_session.commit()
        return user, post

    def _comment(self, db_session, user, post, created_at):
        from app.models import ForumComment

        db_session.add(ForumComment(post_id=post.id, author_id=user.id, content="x", created_at=created_at))
        db_session.commit()

    def test_allows_until_limit(self, db_session, thread):
        from app.services.rate_limit import CommentRateLimiter

        user, post = thread
        limiter = CommentRateLimiter(limit=2, window_minutes=60)
        now = datetime.utcnow()

        assert limiter.check(db_session, user.id, post.id, now=now) == (True, 2, 2)
        self._comment(db_session, user, post, now - timedelta(minutes=5))
        self._comment(db_session, user, post, now - timedelta(minutes=1))

        result = limiter.check(db_session, user.id, post.id, now=now)
        assert result.allowed is False
        assert result.remaining == 0

    def test_old_comments_leave_the_window(self, db_session, thread):
        from app.services.rate_limit import CommentRateLimiter

        user, post = thread
        limiter = CommentRateLimiter(limit=1, window_minutes=60)
        now = datetime.utcnow()
        self._comment(db_session, user, post, now - timedelta(hours=2))

        assert limiter.check(db_session, user.id, post.id, now=now).allowed is True

    def test_enforce_raises_rate_limited(self, db_session, thread):
        from app.services.rate_limit import CommentRateLimiter

        user, post = thread
        limiter = CommentRateLimiter(limit=1, window_minutes=60)
        self._comment(db_session, user, post, datetime.utcnow())

        with pytest.raises(AppError) as exc_info:
            limiter.enforce(db_session, user.id, post.id)
        assert exc_info.value.code == ErrorCode.RATE_LIMITED
