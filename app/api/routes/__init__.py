"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.profile_routes import router as profile_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.forum_routes import router as forum_router
from app.api.routes.mentorship_routes import router as mentorship_router
from app.api.routes.chat_routes import router as chat_router
from app.api.routes.workplace_routes import router as workplace_router
from app.api.routes.badge_routes import router as badge_router
from app.api.routes.notification_routes import router as notification_router
from app.api.routes.report_routes import router as report_router
from app.api.routes.admin_routes import router as admin_router
from app.api.routes.dashboard_routes import router as dashboard_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(forum_router)
api_router.include_router(mentorship_router)
api_router.include_router(chat_router)
api_router.include_router(workplace_router)
api_router.include_router(badge_router)
api_router.include_router(notification_router)
api_router.include_router(report_router)
api_router.include_router(admin_router)
api_router.include_router(dashboard_router)
