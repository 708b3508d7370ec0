"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from eduopps.api.routes.auth_routes import router as auth_router
from eduopps.api.routes.user_routes import router as user_router
from eduopps.api.routes.school_routes import router as school_router
from eduopps.api.routes.opportunity_routes import router as opportunity_router
from eduopps.api.routes.interest_routes import router as interest_router
from eduopps.api.routes.document_routes import router as document_router
from eduopps.api.routes.form_request_routes import router as form_request_router
from eduopps.api.routes.news_routes import router as news_router
from eduopps.api.routes.preference_routes import router as preference_router
from eduopps.api.routes.settings_routes import router as settings_router
from eduopps.api.routes.report_routes import router as report_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(school_router)
api_router.include_router(opportunity_router)
api_router.include_router(interest_router)
api_router.include_router(document_router)
api_router.include_router(form_request_router)
api_router.include_router(news_router)
api_router.include_router(preference_router)
api_router.include_router(settings_router)
api_router.include_router(report_router)
