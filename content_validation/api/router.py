"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from content_validation.api.health import router as health_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])
