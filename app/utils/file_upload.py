"""
File Upload Utility - validate and store uploaded files.

Supported uploads:
- PDF (.pdf) for CVs and mentorship resumes
- Images (.png, .jpg, .jpeg, .webp) for profile and workplace pictures

Files are written under ``settings.upload_dir`` and served from /uploads.
Max file size: ``settings.max_upload_size_mb`` (413 when exceeded)
"""

import os
import uuid
from typing import Tuple

import structlog
from fastapi import UploadFile, HTTPException

from app.core.config import get_settings
from app.core.exceptions import AppError, ErrorCode

settings = get_settings()
logger = structlog.get_logger()

UPLOAD_URL_PREFIX = "/uploads"
PDF_EXTENSIONS = {'.pdf'}
IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.webp'}
IMAGE_CONTENT_TYPES = {'image/png', 'image/jpeg', 'image/webp'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def _read_checked(file: UploadFile) -> bytes:
    content = await file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB"
        )
    return content


def _store(content: bytes, folder: str, ext: str, failure_code: ErrorCode) -> str:
    directory = os.path.join(settings.upload_dir, folder)
    name = f"{uuid.uuid4().hex}{ext}"
    try:
        os.makedirs(directory, exist_ok=True)
        with open(os.path.join(directory, name), "wb") as fh:
            fh.write(content)
    except OSError as e:
        logger.error("File upload failed", folder=folder, error=str(e))
        raise AppError(failure_code, "Upload failed")
    return f"{UPLOAD_URL_PREFIX}/{folder}/{name}"


async def save_pdf(file: UploadFile, folder: str) -> Tuple[str, str]:
    """
    Validate and store an uploaded PDF.

    Returns:
        Tuple of (public_url, original_filename)

    Raises:
        AppError RESUME_FILE_REQUIRED / RESUME_FILE_CONTENT_TYPE_INVALID
    """
    if file is None or not file.filename:
        raise AppError(ErrorCode.RESUME_FILE_REQUIRED, "Resume file is required")

    ext = get_file_extension(file.filename)
    if ext not in PDF_EXTENSIONS:
        raise AppError(ErrorCode.RESUME_FILE_CONTENT_TYPE_INVALID, "Only PDF files are allowed")

    content = await _read_checked(file)
    if not content:
        raise AppError(ErrorCode.RESUME_FILE_REQUIRED, "Resume file is empty")
    if not content.startswith(b"%PDF"):
        raise AppError(ErrorCode.RESUME_FILE_CONTENT_TYPE_INVALID, "Only PDF files are allowed")

    url = _store(content, folder, ext, ErrorCode.RESUME_FILE_UPLOAD_FAILED)
    logger.info("PDF stored", folder=folder, url=url, size=len(content))
    return url, file.filename


async def save_image(file: UploadFile, folder: str) -> str:
    """Validate and store an uploaded image, returning its public URL."""
    if file is None or not file.filename:
        raise AppError(ErrorCode.IMAGE_FILE_REQUIRED, "Image file is required")

    ext = get_file_extension(file.filename)
    if ext not in IMAGE_EXTENSIONS or (file.content_type and file.content_type not in IMAGE_CONTENT_TYPES):
        raise AppError(
            ErrorCode.IMAGE_CONTENT_TYPE_INVALID,
            f"Unsupported image type '{ext}'. Allowed: PNG, JPEG, WEBP"
        )

    content = await _read_checked(file)
    if not content:
        raise AppError(ErrorCode.IMAGE_FILE_REQUIRED, "Image file is empty")

    return _store(content, folder, ext, ErrorCode.IMAGE_UPLOAD_FAILED)


def delete_stored_file(url: str) -> None:
    """Remove a previously stored file. Unknown URLs are ignored."""
    if not url or not url.startswith(UPLOAD_URL_PREFIX + "/"):
        return
    path = os.path.join(settings.upload_dir, url[len(UPLOAD_URL_PREFIX) + 1:])
    try:
        os.remove(path)
    except FileNotFoundError:
        logger.warning("Stored file already gone", url=url)
