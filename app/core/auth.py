"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (access and pre-auth OTP tokens)
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import AppError, ErrorCode
from app.db.postgres import get_db
from app.models import User
from app.models.enums import Role

settings = get_settings()

ACCESS_PURPOSE = "ACCESS"
ACCESS_AUDIENCE = "auth"
OTP_PURPOSE = "OTP"
OTP_AUDIENCE = "preauth"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing credentials are reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None,
                        purpose: str = ACCESS_PURPOSE, audience: str = ACCESS_AUDIENCE) -> str:
    """Create JWT token. Defaults to a regular access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "purpose": purpose, "aud": audience})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_user_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "username": user.username, "role": user.role.value})


def create_preauth_token(user: User) -> str:
    """Short-lived token that only allows finishing an OTP login."""
    return create_access_token(
        {"sub": str(user.id), "username": user.username},
        expires_delta=timedelta(minutes=settings.otp_expire_minutes),
        purpose=OTP_PURPOSE,
        audience=OTP_AUDIENCE,
    )


def decode_token(token: str, audience: str = ACCESS_AUDIENCE,
                 purpose: str = ACCESS_PURPOSE) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm], audience=audience,
        )
    except JWTError:
        return None
    if payload.get("purpose") != purpose:
        return None
    return payload


def _load_user(db: Session, payload: Optional[dict]) -> User:
    if not payload or not payload.get("sub"):
        raise AppError(ErrorCode.USER_UNAUTHORIZED, "Invalid or expired token")

    user = db.get(User, int(payload["sub"]))
    if not user:
        raise AppError(ErrorCode.USER_UNAUTHORIZED, "Invalid or expired token")

    if user.is_banned:
        raise AppError(ErrorCode.USER_BANNED, f"Your account has been banned: {user.ban_reason or 'no reason given'}")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @app.get("/protected")
        async def route(user: User = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AppError(ErrorCode.USER_UNAUTHORIZED, "Full authentication is required")
    return _load_user(db, decode_token(credentials.credentials))


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Dependency - current user when a token is sent, None for anonymous callers."""
    if credentials is None:
        return None
    return _load_user(db, decode_token(credentials.credentials))


async def require_employer(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require employer role."""
    if user.role != Role.ROLE_EMPLOYER:
        raise AppError(ErrorCode.ACCESS_DENIED, "Employers only")
    return user


async def require_jobseeker(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require job seeker role."""
    if user.role != Role.ROLE_JOBSEEKER:
        raise AppError(ErrorCode.ACCESS_DENIED, "Job seekers only")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require admin role."""
    if user.role != Role.ROLE_ADMIN:
        raise AppError(ErrorCode.ACCESS_DENIED, "Access denied")
    return user


def is_admin(user: User) -> bool:
    return user.role == Role.ROLE_ADMIN
