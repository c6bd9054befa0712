"""Upload API routes."""

import os
from typing import List, Optional

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from server import config
from server.cleanup_task import TempFileReaper
from server.exceptions import ValidationError
from server.schemas.common import ErrorResponse
from server.schemas.upload import (
    CleanupResponse,
    FileRecordResponse,
    UploadConfigResponse,
    UploadResponse,
    UploadStatusResponse,
)
from server.services.upload_service import UploadService
from server.types import ChunkRequest, IncomingFile

router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post(
    "",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def upload(
    files: Optional[List[UploadFile]] = File(None),
    path: Optional[str] = Form(None),
    path_query: Optional[str] = Query(None, alias="path"),
    chunk_index: Optional[int] = Form(None, alias="chunkIndex"),
    total_chunks: Optional[int] = Form(None, alias="totalChunks"),
    file_name: Optional[str] = Form(None, alias="fileName"),
    upload_id: Optional[str] = Form(None, alias="uploadId"),
    chunk_size: Optional[int] = Form(None, alias="chunkSize"),
):
    """
    Upload whole files, or one chunk of a large file.

    Parameters:
        - files: File content (multipart/form-data); exactly one entry for a chunk
        - path: Destination directory relative to the storage root (form field or query)
        - chunkIndex, totalChunks, fileName: Present together for a chunked request
        - uploadId: Token returned for chunk 0, required on later chunks
        - chunkSize: Planner chunk size in bytes, used to place the chunk

    Returns:
        - Whole file: success, message, files, uploadPath
        - Chunk: success, message, chunkIndex, totalChunks, completed, uploadId
          (plus files and uploadPath once completed)

    Raises:
        - 400: Invalid chunk metadata, file name or path
        - 404: Unknown uploadId
        - 500: Write or rename failure
        - 503: Storage directory not accessible
    """
    upload_path = path if path is not None else (path_query or "/")
    upload_service = UploadService()

    chunk_fields = (chunk_index, total_chunks, file_name)
    if all(field is None for field in chunk_fields):
        incoming = [
            IncomingFile(file_name=f.filename or "", stream=f.file, content_type=f.content_type)
            for f in files or []
        ]
        result = await run_in_threadpool(upload_service.upload_files, incoming, upload_path)
        return UploadResponse(
            message=f"Successfully uploaded {len(result.files)} file(s)",
            files=[FileRecordResponse.from_record(r) for r in result.files],
            upload_path=result.upload_path,
        )

    if any(field is None for field in chunk_fields):
        raise ValidationError("chunkIndex, totalChunks and fileName must be sent together")

    if not files or len(files) != 1:
        raise ValidationError("A chunk request must carry exactly one file part")

    chunk = files[0]
    request = ChunkRequest(
        stream=chunk.file,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
        file_name=file_name,
        upload_path=upload_path,
        upload_id=upload_id,
        chunk_size=chunk_size,
        content_type=chunk.content_type,
    )
    result = await run_in_threadpool(upload_service.upload_chunk, request)

    if not result.completed:
        return UploadResponse(
            message=f"Chunk {result.chunk_index + 1}/{result.total_chunks} received",
            chunk_index=result.chunk_index,
            total_chunks=result.total_chunks,
            completed=False,
            upload_id=result.upload_id,
        )

    return UploadResponse(
        message=f"Successfully uploaded {result.record.name}",
        files=[FileRecordResponse.from_record(result.record)],
        upload_path=result.upload_path,
        chunk_index=result.chunk_index,
        total_chunks=result.total_chunks,
        completed=True,
        upload_id=result.upload_id,
    )


@router.get("", response_model=UploadStatusResponse)
async def upload_status():
    """
    Report upload configuration and whether the storage root is usable.
    """
    storage_accessible = os.path.isdir(config.STORAGE_PATH) and os.access(config.STORAGE_PATH, os.W_OK)

    return UploadStatusResponse(
        message="Upload endpoint is working",
        config=UploadConfigResponse(
            storage_path=config.STORAGE_PATH,
            max_file_size=config.MAX_FILE_SIZE,
            max_total_uploads=config.MAX_TOTAL_UPLOADS,
            max_files_count=config.MAX_FILES_COUNT,
            chunk_size=config.CHUNK_SIZE,
        ),
        storage_accessible=storage_accessible,
    )


@router.delete("", response_model=CleanupResponse)
async def cleanup_temp_files(
    max_age_seconds: Optional[int] = Query(None, alias="maxAgeSeconds", ge=0)
):
    """
    Remove orphaned temp files left by abandoned chunked uploads now.

    Parameters:
        - maxAgeSeconds: Override the configured orphan age

    Returns:
        - removed: Number of temp files deleted
    """
    reaper = TempFileReaper(max_age_seconds=max_age_seconds)
    removed = await run_in_threadpool(reaper.sweep)

    return CleanupResponse(
        message=f"Cleanup completed successfully, removed {removed} temp file(s)",
        removed=removed,
    )
