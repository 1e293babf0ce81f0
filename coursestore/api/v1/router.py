"""API v1 router aggregation."""

from fastapi import APIRouter

from coursestore.api.v1.endpoints import cdn, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(cdn.router, prefix="/admin/cdn", tags=["admin-cdn"])
