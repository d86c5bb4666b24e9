"""
Main API router for the application
"""
from fastapi import APIRouter

# Import all route modules
from api.endpoints import ai, analytics

# Create main API router
api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    ai.router,
    prefix="/ai",
    tags=["ai"]
)

api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"]
)
