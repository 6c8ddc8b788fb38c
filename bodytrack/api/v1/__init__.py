"""API v1 router aggregation."""

from fastapi import APIRouter

from bodytrack.api.v1.endpoints import health, measurements, sessions

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(measurements.router, prefix="/measurements", tags=["measurements"])
