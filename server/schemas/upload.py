"""Pydantic schemas for the upload endpoints."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from common.types import FileRecord


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRecordResponse(CamelModel):
    """Response model for a stored file."""
    id: str
    name: str
    original_name: str
    size: int
    mime_type: str
    relative_path: str
    uploaded_at: str
    size_formatted: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileRecordResponse":
        return cls(**record.to_dict())


class UploadResponse(CamelModel):
    """
    Response model for POST /api/upload.

    Whole-file uploads fill ``files`` and ``upload_path``; chunk
    acknowledgements fill the chunk fields and ``completed``. Unset
    fields are omitted from the JSON body.
    """
    success: bool = True
    message: str
    files: Optional[List[FileRecordResponse]] = None
    upload_path: Optional[str] = None
    chunk_index: Optional[int] = None
    total_chunks: Optional[int] = None
    completed: Optional[bool] = None
    upload_id: Optional[str] = None


class UploadConfigResponse(CamelModel):
    """Response model for upload configuration."""
    storage_path: str
    max_file_size: str
    max_total_uploads: str
    max_files_count: int
    chunk_size: str


class UploadStatusResponse(CamelModel):
    """Response model for GET /api/upload."""
    message: str
    config: UploadConfigResponse
    storage_accessible: bool


class CleanupResponse(CamelModel):
    """Response model for DELETE /api/upload."""
    success: bool = True
    message: str
    removed: int
