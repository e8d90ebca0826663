"""
Authentication Routes

POST /auth/register - Register new user (employer or job seeker)
POST /auth/verify-email - Confirm email with the emailed token
POST /auth/login - Login and get JWT token (or an OTP challenge)
POST /auth/login/verify - Exchange pre-auth token + OTP code for JWT token
POST /auth/password-reset - Request a password reset email
POST /auth/password-reset/confirm - Set a new password with the reset token
POST /auth/password-change - Change password (logged in)
GET /auth/me - Get current user info
DELETE /auth/me - Delete own account
"""

from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import get_current_user
from app.db.postgres import get_db
from app.models import User
from app.schemas.schemas import (
    LoginRequest,
    MessageResponse,
    OtpChallengeResponse,
    OtpVerifyRequest,
    PasswordChangeRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
    VerifyEmailRequest,
)
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user account.

    A verification link is emailed; login is refused until it is used.
    """
    user = auth_service.register(db, request)
    return auth_service.to_user_response(user)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(request: VerifyEmailRequest, db: Session = Depends(get_db)):
    auth_service.verify_email(db, request.token)
    return MessageResponse(message="Email verified. You can now login.")


@router.post("/login", response_model=Union[TokenResponse, OtpChallengeResponse])
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    When OTP is enabled a temp_token is returned instead; send it with the
    emailed code to /auth/login/verify.
    """
    return auth_service.login(db, request.username, request.password)


@router.post("/login/verify", response_model=TokenResponse)
async def verify_login(request: OtpVerifyRequest, db: Session = Depends(get_db)):
    return auth_service.verify_otp(db, request.temp_token, request.code)


@router.post("/password-reset", response_model=MessageResponse)
async def request_password_reset(request: PasswordResetRequest, db: Session = Depends(get_db)):
    """Always succeeds so the endpoint cannot be used to probe emails."""
    auth_service.request_password_reset(db, request.email)
    return MessageResponse(message="If the email is registered, a reset link has been sent.")


@router.post("/password-reset/confirm", response_model=MessageResponse)
async def confirm_password_reset(request: PasswordResetConfirmRequest, db: Session = Depends(get_db)):
    auth_service.confirm_password_reset(db, request.token, request.new_password)
    return MessageResponse(message="Password has been reset. Please login.")


@router.post("/password-change", response_model=MessageResponse)
async def change_password(
    request: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, user, request.current_password, request.new_password)
    return MessageResponse(message="Password changed")


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return auth_service.to_user_response(user)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    auth_service.delete_account(db, user)
    return MessageResponse(message="Account deleted")
