"""
Auth Service

Account lifecycle: registration, email verification, login (optionally with
an emailed one-time code), password reset/change and account deletion.
"""

import secrets
from datetime import datetime, timedelta
from typing import Union

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.auth import (
    OTP_AUDIENCE,
    OTP_PURPOSE,
    create_preauth_token,
    create_user_token,
    decode_token,
    hash_password,
    verify_password,
)
from app.core.config import get_settings
from app.core.exceptions import AppError, ErrorCode
from app.models import AuthToken, MentorProfile, Profile, ResumeReview, ReviewHelpful, User, WorkplaceReview
from app.models.enums import ResumeReviewStatus, Role, TokenPurpose
from app.schemas.schemas import (
    OtpChallengeResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.services import mail_service, review_service

settings = get_settings()
logger = structlog.get_logger()

SELF_REGISTER_ROLES = (Role.ROLE_EMPLOYER, Role.ROLE_JOBSEEKER)


def _issue_token(db: Session, user: User, purpose: TokenPurpose, minutes: int, code: str = None) -> AuthToken:
    token = AuthToken(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        purpose=purpose,
        code=code,
        expires_at=datetime.utcnow() + timedelta(minutes=minutes),
    )
    db.add(token)
    return token


def _consume_token(db: Session, value: str, purpose: TokenPurpose) -> AuthToken:
    token = db.query(AuthToken).filter(AuthToken.token == value, AuthToken.purpose == purpose).first()
    if not token or token.used:
        raise AppError(ErrorCode.INVALID_TOKEN, "Invalid or already used token")
    if token.expires_at < datetime.utcnow():
        raise AppError(ErrorCode.TOKEN_EXPIRED, "Token has expired")
    token.used = True
    return token


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        email_verified=user.email_verified,
        created_at=user.created_at,
    )


def register(db: Session, request: RegisterRequest) -> User:
    if request.role not in SELF_REGISTER_ROLES:
        raise AppError(ErrorCode.ROLE_INVALID, "Role must be ROLE_EMPLOYER or ROLE_JOBSEEKER")

    existing = db.query(User).filter(
        or_(User.username == request.username, User.email == request.email)
    ).first()
    if existing:
        raise AppError(ErrorCode.USER_ALREADY_EXISTS, "Username or email is already in use")

    user = User(
        username=request.username,
        email=request.email,
        password_hash=hash_password(request.password),
        role=request.role,
        email_verified=not settings.require_email_verification,
    )
    db.add(user)
    db.flush()

    db.add(Profile(
        user_id=user.id,
        first_name=request.first_name,
        last_name=request.last_name,
        bio=request.bio,
        pronoun_set=request.pronoun_set,
    ))

    if settings.require_email_verification:
        token = _issue_token(db, user, TokenPurpose.VERIFY_EMAIL, settings.email_token_expire_minutes)
        mail_service.send_verification_email(user.email, user.username, token.token)

    db.commit()
    logger.info("User registered", user_id=user.id, role=user.role.value)
    return user


def verify_email(db: Session, token_value: str) -> None:
    token = _consume_token(db, token_value, TokenPurpose.VERIFY_EMAIL)
    token.user.email_verified = True
    db.commit()
    logger.info("Email verified", user_id=token.user_id)


def _check_can_login(user: User) -> None:
    if not user.email_verified:
        raise AppError(ErrorCode.EMAIL_NOT_VERIFIED, "Please verify your email before logging in")
    if user.is_banned:
        raise AppError(ErrorCode.ACCOUNT_BANNED, f"Your account has been banned: {user.ban_reason or 'no reason given'}")


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_user_token(user),
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )


def login(db: Session, username: str, password: str) -> Union[TokenResponse, OtpChallengeResponse]:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        raise AppError(ErrorCode.INVALID_CREDENTIALS, "Invalid username or password")
    _check_can_login(user)

    if not settings.otp_enabled:
        logger.info("User logged in", user_id=user.id)
        return _token_response(user)

    code = f"{secrets.randbelow(10 ** 6):06d}"
    _issue_token(db, user, TokenPurpose.OTP, settings.otp_expire_minutes, code=code)
    mail_service.send_otp_email(user.email, user.username, code)
    db.commit()
    return OtpChallengeResponse(temp_token=create_preauth_token(user))


def verify_otp(db: Session, temp_token: str, code: str) -> TokenResponse:
    payload = decode_token(temp_token, audience=OTP_AUDIENCE, purpose=OTP_PURPOSE)
    if not payload or not payload.get("sub"):
        raise AppError(ErrorCode.INVALID_TOKEN, "Invalid or expired login session")

    user = db.get(User, int(payload["sub"]))
    if not user:
        raise AppError(ErrorCode.USER_NOT_FOUND, "User not found")
    _check_can_login(user)

    token = (
        db.query(AuthToken)
        .filter(
            AuthToken.user_id == user.id,
            AuthToken.purpose == TokenPurpose.OTP,
            AuthToken.used.is_(False),
        )
        .order_by(AuthToken.created_at.desc(), AuthToken.id.desc())
        .first()
    )
    if not token or token.code != code:
        raise AppError(ErrorCode.AUTHENTICATION_FAILED, "Invalid login code")
    if token.expires_at < datetime.utcnow():
        raise AppError(ErrorCode.TOKEN_EXPIRED, "Login code has expired")

    token.used = True
    db.commit()
    logger.info("User logged in with OTP", user_id=user.id)
    return _token_response(user)


def request_password_reset(db: Session, email: str) -> None:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        # Same response for unknown emails
        logger.info("Password reset requested for unknown email")
        return
    token = _issue_token(db, user, TokenPurpose.RESET_PASSWORD, settings.email_token_expire_minutes)
    mail_service.send_password_reset_email(user.email, user.username, token.token)
    db.commit()


def confirm_password_reset(db: Session, token_value: str, new_password: str) -> None:
    token = _consume_token(db, token_value, TokenPurpose.RESET_PASSWORD)
    token.user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password reset", user_id=token.user_id)


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise AppError(ErrorCode.CURRENT_PASSWORD_INVALID, "Current password is incorrect")
    if current_password == new_password:
        raise AppError(ErrorCode.PASSWORD_SAME_AS_OLD, "New password must be different from the current one")
    user.password_hash = hash_password(new_password)
    db.commit()
    logger.info("Password changed", user_id=user.id)


def delete_account(db: Session, user: User) -> None:
    """
    Delete the user; owned rows go with it through ON DELETE CASCADE.

    Counters stored on other rows, such as mentor capacity and review
    counts, are settled first.
    """
    active_reviews = db.query(ResumeReview).filter(
        ResumeReview.job_seeker_id == user.id,
        ResumeReview.status == ResumeReviewStatus.ACTIVE,
    ).all()
    for review in active_reviews:
        mentor = db.get(MentorProfile, review.mentor_id)
        if mentor and mentor.current_mentees > 0:
            mentor.current_mentees -= 1

    for review in db.query(WorkplaceReview).filter(WorkplaceReview.user_id == user.id).all():
        review_service.remove_review(db, review, reason=f"Author {user.id} deleted")
    db.flush()
    marked = db.query(WorkplaceReview).join(ReviewHelpful, ReviewHelpful.review_id == WorkplaceReview.id).filter(
        ReviewHelpful.user_id == user.id
    ).all()
    for review in marked:
        review.helpful_count = max(0, (review.helpful_count or 0) - 1)

    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("Account deleted", user_id=user_id)
