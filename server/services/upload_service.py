"""Upload service: whole-file uploads and chunked upload reassembly."""

import logging
from pathlib import Path
from typing import List, Optional

from server import config
from server import temp_storage
from server.exceptions import InvalidPathError, UploadSessionNotFoundError, ValidationError
from server.finalizer import build_file_record, promote_temp_file
from server.paths import (
    ensure_directory,
    ensure_storage_root,
    resolve_destination,
    sanitize_file_name,
    to_relative_path,
)
from server.types import ChunkRequest, ChunkResult, IncomingFile, UploadResult

logger = logging.getLogger(__name__)


def validate_chunk_request(request: ChunkRequest) -> None:
    """
    Check chunk metadata before anything touches the disk.

    Raises:
        ValidationError: On an out-of-range index, a non-positive count
            or chunk size, or an empty file name
    """
    if request.total_chunks <= 0:
        raise ValidationError(f"totalChunks must be positive, got {request.total_chunks}")

    if not 0 <= request.chunk_index < request.total_chunks:
        raise ValidationError(
            f"chunkIndex {request.chunk_index} out of range for {request.total_chunks} chunks"
        )

    if request.file_name is None or not request.file_name.strip():
        raise ValidationError("fileName must be a non-empty string")

    if request.chunk_size is not None and request.chunk_size <= 0:
        raise ValidationError(f"chunkSize must be positive, got {request.chunk_size}")


class UploadService:
    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or config.STORAGE_PATH)

    def _prepare_destination(self, upload_path: str):
        root = ensure_storage_root(self.storage_root)
        destination = resolve_destination(root, upload_path)

        temp_dir = (root / config.TEMP_DIR_NAME).resolve()
        if destination == temp_dir or temp_dir in destination.parents:
            raise InvalidPathError(f"Invalid path: '{upload_path}' is reserved")

        ensure_directory(destination)
        return root, destination, temp_storage.get_temp_dir(root)

    def upload_files(self, files: List[IncomingFile], upload_path: str = "/") -> UploadResult:
        """
        Store one or more whole files in a single request.

        Every file is staged in a temp file before any is promoted, so a
        failed write leaves nothing in the destination. Promotion then works
        like the last chunk of a chunked upload and handles name collisions
        identically. A promotion failure part way through the batch leaves
        the files promoted before it in place.
        """
        if not files:
            raise ValidationError("No files provided")

        names = [sanitize_file_name(f.file_name) for f in files]
        root, destination, temp_dir = self._prepare_destination(upload_path)

        logger.info(f"Processing {len(files)} file(s) into {to_relative_path(root, destination)}")

        staged = []
        try:
            for incoming, file_name in zip(files, names):
                _, temp_path = temp_storage.mint_upload(temp_dir, file_name)
                staged.append(temp_path)
                temp_storage.write_at(temp_path, incoming.stream, 0, truncate=True)
        except Exception:
            for temp_path in staged:
                temp_storage.discard(temp_path)
            raise

        records = []
        for index, (incoming, file_name) in enumerate(zip(files, names)):
            try:
                final_path = promote_temp_file(staged[index], destination, file_name)
            except Exception:
                for temp_path in staged[index:]:
                    temp_storage.discard(temp_path)
                raise

            record = build_file_record(root, final_path, file_name, incoming.content_type)
            records.append(record)
            logger.info(f"Stored {record.relative_path} ({record.size} bytes)")

        return UploadResult(upload_path=to_relative_path(root, destination), files=records)

    def upload_chunk(self, request: ChunkRequest) -> ChunkResult:
        """
        Apply one chunk of a chunked upload.

        Chunk 0 mints the upload token; later chunks must echo it. Bytes are
        written at the chunk's own offset, and the final chunk promotes the
        temp file to its collision-free final name.

        Returns:
            ChunkResult, completed with a record for the final chunk

        Raises:
            ValidationError: Bad metadata or token
            UploadSessionNotFoundError: Token whose temp file is gone
            StorageUnavailableError / StorageIOError: Filesystem failures
        """
        validate_chunk_request(request)
        file_name = sanitize_file_name(request.file_name)
        root, destination, temp_dir = self._prepare_destination(request.upload_path)
        upload_path = to_relative_path(root, destination)

        data_length = temp_storage.stream_length(request.stream)
        if request.chunk_size:
            if not request.is_final and data_length != request.chunk_size:
                raise ValidationError(
                    f"Chunk {request.chunk_index} has {data_length} bytes, expected {request.chunk_size}"
                )
            if request.is_final and data_length > request.chunk_size:
                raise ValidationError(
                    f"Final chunk has {data_length} bytes, more than chunkSize {request.chunk_size}"
                )

        if request.chunk_index == 0:
            upload_id, temp_path = temp_storage.mint_upload(temp_dir, file_name)
            logger.info(
                f"Started chunked upload {upload_id} for {file_name} ({request.total_chunks} chunks)"
            )
        else:
            upload_id = request.upload_id
            temp_path = temp_storage.locate_upload(temp_dir, upload_id, file_name)
            if not temp_path.exists():
                record = temp_storage.read_completion_marker(temp_dir, upload_id)
                if record is not None and request.is_final:
                    logger.info(f"Final chunk of {upload_id} repeated, returning stored record")
                    return ChunkResult(
                        upload_id=upload_id,
                        chunk_index=request.chunk_index,
                        total_chunks=request.total_chunks,
                        upload_path=upload_path,
                        completed=True,
                        record=record,
                    )
                raise UploadSessionNotFoundError(f"No upload in progress for uploadId '{upload_id}'")

        current_size = temp_path.stat().st_size
        offset = temp_storage.compute_offset(
            request.chunk_index,
            request.chunk_size,
            data_length,
            request.is_final,
            current_size,
        )
        # Writes may rewrite received bytes but never skip past the end of file.
        if offset > current_size:
            raise ValidationError(
                f"Chunk {request.chunk_index} of {upload_id} starts at byte {offset} "
                f"but only {current_size} bytes were received"
            )
        temp_storage.write_at(temp_path, request.stream, offset, truncate=request.is_final)
        logger.debug(
            f"Wrote chunk {request.chunk_index + 1}/{request.total_chunks} of {upload_id} "
            f"({data_length} bytes at offset {offset})"
        )

        if not request.is_final:
            return ChunkResult(
                upload_id=upload_id,
                chunk_index=request.chunk_index,
                total_chunks=request.total_chunks,
                upload_path=upload_path,
                completed=False,
            )

        final_path = promote_temp_file(temp_path, destination, file_name)
        record = build_file_record(root, final_path, file_name, request.content_type)
        temp_storage.write_completion_marker(temp_dir, upload_id, record)
        logger.info(f"Chunked upload {upload_id} completed as {record.relative_path} ({record.size} bytes)")

        return ChunkResult(
            upload_id=upload_id,
            chunk_index=request.chunk_index,
            total_chunks=request.total_chunks,
            upload_path=upload_path,
            completed=True,
            record=record,
        )
