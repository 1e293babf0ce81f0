"""CDN admin endpoints: status and cache purge."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from coursestore.api.v1.dependencies import (
    get_asset_service,
    get_cdn_service,
    require_admin_key,
)
from coursestore.application.dtos.cdn import PurgeRequest, PurgeResult
from coursestore.application.services.asset_service import (
    AssetService,
    validate_course_id,
)
from coursestore.application.services.cdn_service import CdnService
from coursestore.domain.exceptions import CourseNotFoundException, ValidationException
from coursestore.schemas.cdn import (
    CdnStatusItem,
    CdnStatusResponse,
    PurgeRequestBody,
    PurgeResponse,
    StorageInfoItem,
)

router = APIRouter(dependencies=[Depends(require_admin_key)])


def _purge_response(result: PurgeResult) -> PurgeResponse | JSONResponse:
    body = PurgeResponse.model_validate(result)
    if result.success:
        return body
    return JSONResponse(status_code=502, content=body.model_dump())


@router.get("/status", response_model=CdnStatusResponse)
async def get_cdn_status(
    cdn_service: Annotated[CdnService, Depends(get_cdn_service)],
    asset_service: Annotated[AssetService, Depends(get_asset_service)],
) -> CdnStatusResponse:
    """Report CDN state and the active storage adapter."""
    status = await cdn_service.get_cdn_status()
    info = await asset_service.get_storage_info()
    return CdnStatusResponse(
        cdn=CdnStatusItem.model_validate(status),
        storage=StorageInfoItem.model_validate(info),
    )


@router.post(
    "/purge",
    response_model=PurgeResponse,
    responses={502: {"description": "Purge failed", "model": PurgeResponse}},
)
async def purge_cache(
    body: PurgeRequestBody,
    cdn_service: Annotated[CdnService, Depends(get_cdn_service)],
) -> PurgeResponse | JSONResponse:
    """Purge by global flag, pattern, keys or URLs (first one set wins)."""
    if not (body.purge_all or body.pattern or body.keys or body.urls):
        raise ValidationException(
            "Specify purge_all, pattern, keys or urls", field="body"
        )
    if not (body.purge_all or body.pattern or body.keys):
        result = await cdn_service.purge_urls(body.urls or [])
    else:
        result = await cdn_service.purge_cache(
            PurgeRequest(purge_all=body.purge_all, pattern=body.pattern, keys=body.keys)
        )
    return _purge_response(result)


@router.post(
    "/purge/{course_id}",
    response_model=PurgeResponse,
    responses={
        404: {"description": "Course not found"},
        502: {"description": "Purge failed", "model": PurgeResponse},
    },
)
async def purge_course_cache(
    course_id: str,
    cdn_service: Annotated[CdnService, Depends(get_cdn_service)],
) -> PurgeResponse | JSONResponse:
    """Purge everything cached for one course."""
    validate_course_id(course_id)
    if cdn_service.course_lookup is not None:
        if await cdn_service.course_lookup.get_course(course_id) is None:
            raise CourseNotFoundException(course_id)
    return _purge_response(await cdn_service.purge_course_cache(course_id))
