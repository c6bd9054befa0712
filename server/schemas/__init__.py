"""Pydantic schemas for API requests and responses."""

from server.schemas.upload import (
    CleanupResponse,
    FileRecordResponse,
    UploadConfigResponse,
    UploadResponse,
    UploadStatusResponse,
)
from server.schemas.common import ErrorResponse

__all__ = [
    "CleanupResponse",
    "FileRecordResponse",
    "UploadConfigResponse",
    "UploadResponse",
    "UploadStatusResponse",
    "ErrorResponse",
]
