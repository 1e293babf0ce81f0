"""Health check endpoints: liveness and storage readiness."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from coursestore.api.v1.dependencies import get_asset_service
from coursestore.application.services.asset_service import AssetService
from coursestore.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Storage unhealthy", "model": ReadinessErrorResponse}},
)
async def readiness_check(
    asset_service: Annotated[AssetService, Depends(get_asset_service)],
) -> ReadinessResponse | JSONResponse:
    """Return 200 when the active storage adapter passes its health check, else 503."""
    info = await asset_service.get_storage_info()
    if info.healthy:
        return ReadinessResponse(storage=info.type)
    return JSONResponse(
        status_code=503,
        content=ReadinessErrorResponse(
            message=f"{info.type} storage failed its health check"
        ).model_dump(),
    )
