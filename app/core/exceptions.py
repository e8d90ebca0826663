"""
Application errors and the global exception handlers.

Services raise ``AppError(ErrorCode.X, "message")``. The handlers registered
on the FastAPI app turn every error into the same ApiError body:

    {timestamp, status, error, code, message, path, violations}
"""

from datetime import datetime
from enum import Enum
from http import HTTPStatus
from typing import List, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class ErrorCode(str, Enum):
    # 400
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MALFORMED_JSON = "MALFORMED_JSON"
    MISSING_FILTER_PARAMETER = "MISSING_FILTER_PARAMETER"
    PASSWORD_SAME_AS_OLD = "PASSWORD_SAME_AS_OLD"
    ROLE_INVALID = "ROLE_INVALID"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    MENTEE_CAPACITY_CONFLICT = "MENTEE_CAPACITY_CONFLICT"
    MENTOR_UNAVAILABLE = "MENTOR_UNAVAILABLE"
    MENTORSHIP_NOT_ACTIVE = "MENTORSHIP_NOT_ACTIVE"
    REQUEST_ALREADY_PROCESSED = "REQUEST_ALREADY_PROCESSED"
    EMPLOYER_REQUEST_INVALID_ACTION = "EMPLOYER_REQUEST_INVALID_ACTION"
    EMPLOYER_REQUEST_ALREADY_RESOLVED = "EMPLOYER_REQUEST_ALREADY_RESOLVED"
    WORKPLACE_OWNER_MINIMUM_REQUIRED = "WORKPLACE_OWNER_MINIMUM_REQUIRED"
    IMAGE_FILE_REQUIRED = "IMAGE_FILE_REQUIRED"
    IMAGE_CONTENT_TYPE_INVALID = "IMAGE_CONTENT_TYPE_INVALID"
    RESUME_FILE_REQUIRED = "RESUME_FILE_REQUIRED"
    RESUME_FILE_CONTENT_TYPE_INVALID = "RESUME_FILE_CONTENT_TYPE_INVALID"
    ACTIVE_MENTORSHIP_EXIST = "ACTIVE_MENTORSHIP_EXIST"

    # 401
    USER_UNAUTHORIZED = "USER_UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    CURRENT_PASSWORD_INVALID = "CURRENT_PASSWORD_INVALID"

    # 403
    ACCESS_DENIED = "ACCESS_DENIED"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    ACCOUNT_BANNED = "ACCOUNT_BANNED"
    USER_BANNED = "USER_BANNED"
    WORKPLACE_UNAUTHORIZED = "WORKPLACE_UNAUTHORIZED"
    UNAUTHORIZED_REVIEW_ACCESS = "UNAUTHORIZED_REVIEW_ACCESS"

    # 404
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    JOB_POST_NOT_FOUND = "JOB_POST_NOT_FOUND"
    JOB_APPLICATION_NOT_FOUND = "JOB_APPLICATION_NOT_FOUND"
    WORKPLACE_NOT_FOUND = "WORKPLACE_NOT_FOUND"
    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"
    REPLY_NOT_FOUND = "REPLY_NOT_FOUND"
    EMPLOYER_REQUEST_NOT_FOUND = "EMPLOYER_REQUEST_NOT_FOUND"
    EMPLOYER_LINK_NOT_FOUND = "EMPLOYER_LINK_NOT_FOUND"
    MENTOR_PROFILE_NOT_FOUND = "MENTOR_PROFILE_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    RESUME_REVIEW_NOT_FOUND = "RESUME_REVIEW_NOT_FOUND"
    RESUME_FILE_NOT_FOUND = "RESUME_FILE_NOT_FOUND"
    CONVERSATION_NOT_FOUND = "CONVERSATION_NOT_FOUND"
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    EDUCATION_NOT_FOUND = "EDUCATION_NOT_FOUND"
    EXPERIENCE_NOT_FOUND = "EXPERIENCE_NOT_FOUND"
    SKILL_NOT_FOUND = "SKILL_NOT_FOUND"
    INTEREST_NOT_FOUND = "INTEREST_NOT_FOUND"
    POST_NOT_FOUND = "POST_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"

    # 409
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    PROFILE_ALREADY_EXISTS = "PROFILE_ALREADY_EXISTS"
    APPLICATION_ALREADY_EXISTS = "APPLICATION_ALREADY_EXISTS"
    REVIEW_ALREADY_EXISTS = "REVIEW_ALREADY_EXISTS"
    REPLY_ALREADY_EXISTS = "REPLY_ALREADY_EXISTS"
    MENTOR_PROFILE_ALREADY_EXISTS = "MENTOR_PROFILE_ALREADY_EXISTS"
    EMPLOYER_ALREADY_ASSIGNED = "EMPLOYER_ALREADY_ASSIGNED"
    EMPLOYER_REQUEST_ALREADY_EXISTS = "EMPLOYER_REQUEST_ALREADY_EXISTS"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # 429
    RATE_LIMITED = "RATE_LIMITED"

    # 500
    RESUME_FILE_UPLOAD_FAILED = "RESUME_FILE_UPLOAD_FAILED"
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def status(self) -> int:
        return _STATUS_BY_CODE.get(self, 400)


_STATUS_BY_CODE = {}
for _code in ErrorCode:
    if _code.name in ("USER_UNAUTHORIZED", "INVALID_CREDENTIALS",
                      "AUTHENTICATION_FAILED", "CURRENT_PASSWORD_INVALID"):
        _STATUS_BY_CODE[_code] = 401
    elif _code.name in ("ACCESS_DENIED", "EMAIL_NOT_VERIFIED", "ACCOUNT_BANNED",
                        "USER_BANNED", "WORKPLACE_UNAUTHORIZED",
                        "UNAUTHORIZED_REVIEW_ACCESS"):
        _STATUS_BY_CODE[_code] = 403
    elif _code.name == "NOT_FOUND" or _code.name.endswith("_NOT_FOUND"):
        _STATUS_BY_CODE[_code] = 404
    elif _code.name.endswith("_ALREADY_EXISTS") or _code.name in (
            "EMPLOYER_ALREADY_ASSIGNED", "RESOURCE_CONFLICT"):
        _STATUS_BY_CODE[_code] = 409
    elif _code.name == "RATE_LIMITED":
        _STATUS_BY_CODE[_code] = 429
    elif _code.name in ("RESUME_FILE_UPLOAD_FAILED", "IMAGE_UPLOAD_FAILED", "INTERNAL_ERROR"):
        _STATUS_BY_CODE[_code] = 500
    else:
        _STATUS_BY_CODE[_code] = 400

# Framework errors (missing bearer token, unknown route, ...) keyed by status
_CODE_BY_STATUS = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.USER_UNAUTHORIZED,
    403: ErrorCode.ACCESS_DENIED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.RESOURCE_CONFLICT,
}


class AppError(Exception):
    """Business error carrying an ErrorCode and a human readable message."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or code.value.replace("_", " ").capitalize()
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.code.status


def api_error_body(status: int, code: str, message: str, path: str,
                   violations: Optional[List[dict]] = None) -> dict:
    return {
        "timestamp": datetime.utcnow().isoformat(),
        "status": status,
        "error": HTTPStatus(status).phrase,
        "code": code,
        "message": message,
        "path": path,
        "violations": violations,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the ApiError handlers to the application."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.info(
            "Request failed",
            code=exc.code.value,
            message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=api_error_body(exc.status_code, exc.code.value, exc.message, request.url.path),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        violations = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            violations.append({"field": ".".join(loc), "message": error.get("msg", "")})
        code = ErrorCode.VALIDATION_FAILED
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            code = ErrorCode.MALFORMED_JSON
        return JSONResponse(
            status_code=400,
            content=api_error_body(400, code.value, "Validation failed", request.url.path, violations),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            code = "METHOD_NOT_ALLOWED"
        else:
            code = _CODE_BY_STATUS.get(exc.status_code, ErrorCode.BAD_REQUEST).value
        return JSONResponse(
            status_code=exc.status_code,
            content=api_error_body(exc.status_code, code, str(exc.detail), request.url.path),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning("Integrity error", path=request.url.path, error=str(exc.orig))
        return JSONResponse(
            status_code=409,
            content=api_error_body(
                409, ErrorCode.RESOURCE_CONFLICT.value,
                "Resource conflicts with existing data", request.url.path,
            ),
        )
