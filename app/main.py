"""
Ethical Job Board - Main Application

FastAPI backend with:
- PostgreSQL (SQLAlchemy) for all data
- JWT authentication with optional emailed one-time codes
- Job posts, applications, workplaces and workplace reviews
- Forum, mentorship with chat, badges and notifications
- Reports and moderation for admins
- Uploaded files served from /uploads

Run: uvicorn app.main:app --reload
"""

import os

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.core.logging_config import configure_logging
from app.db.postgres import init_db, test_postgres_connection

settings = get_settings()
configure_logging()
logger = structlog.get_logger()

# Create FastAPI app
app = FastAPI(
    title="Ethical Job Board",
    description="""
    A job board and community platform focused on ethical workplaces.

    ## Features
    - **Authentication**: JWT-based auth for employers, job seekers and admins
    - **Profiles**: Education, experience, skills, interests and badges
    - **Jobs**: Job posts with ethical tags and applications with CVs
    - **Workplaces**: Company pages, employer teams, policy-based reviews and replies
    - **Forum**: Posts, threaded comments and votes
    - **Mentorship**: Mentor profiles, requests, resume reviews, ratings and chat
    - **Moderation**: Reports, bans and broadcast notifications
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

register_exception_handlers(app)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "*"] if settings.debug else [settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Serve uploaded files (profile images, CVs, resumes)
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables on startup."""
    init_db()
    logger.info("Application started", database=settings.sqlalchemy_url.split("@")[-1])


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    postgres_ok = test_postgres_connection()
    return {
        "status": "healthy" if postgres_ok else "degraded",
        "postgres": "connected" if postgres_ok else "disconnected",
    }
