"""Application DTOs: plain data passed between services, repositories and API."""

from coursestore.application.dtos.cdn import (
    AssetUploadResult,
    CdnStatus,
    PurgeRequest,
    PurgeResult,
    StorageInfo,
)
from coursestore.application.dtos.course import CourseRecord

__all__ = [
    "AssetUploadResult",
    "CdnStatus",
    "CourseRecord",
    "PurgeRequest",
    "PurgeResult",
    "StorageInfo",
]
