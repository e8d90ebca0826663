"""
Mail Service

Outgoing account emails (verification, password reset, login code).
Messages are written to the structured log instead of an SMTP relay; the
log line carries the recipient, subject and the link or code.
"""

import structlog

from app.core.config import get_settings

settings = get_settings()
logger = structlog.get_logger()


def send_email(to: str, subject: str, body: str, **context) -> None:
    logger.info("Email sent", to=to, subject=subject, body=body, **context)


def send_verification_email(to: str, username: str, token: str) -> None:
    link = f"{settings.frontend_url}/verify-email?token={token}"
    send_email(
        to, "Verify your email",
        f"Hi {username}, confirm your email address by opening {link}. "
        f"The link expires in {settings.email_token_expire_minutes} minutes.",
        link=link,
    )


def send_password_reset_email(to: str, username: str, token: str) -> None:
    link = f"{settings.frontend_url}/reset-password?token={token}"
    send_email(
        to, "Reset your password",
        f"Hi {username}, reset your password by opening {link}. "
        f"The link expires in {settings.email_token_expire_minutes} minutes.",
        link=link,
    )


def send_otp_email(to: str, username: str, code: str) -> None:
    send_email(
        to, "Your login code",
        f"Hi {username}, your login code is {code}. "
        f"It expires in {settings.otp_expire_minutes} minutes.",
    )
