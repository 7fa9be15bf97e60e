"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from tpo_portal.api.routes.auth_routes import router as auth_router
from tpo_portal.api.routes.analytics_routes import router as analytics_router
from tpo_portal.api.routes.company_routes import router as company_router
from tpo_portal.api.routes.faculty_routes import router as faculty_router
from tpo_portal.api.routes.notification_routes import router as notification_router
from tpo_portal.api.routes.student_routes import router as student_router
from tpo_portal.api.routes.user_routes import router as user_router
from tpo_portal.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(analytics_router)
api_router.include_router(company_router)
api_router.include_router(faculty_router)
api_router.include_router(notification_router)
api_router.include_router(student_router)
api_router.include_router(user_router)
api_router.include_router(admin_router)
