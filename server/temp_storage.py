"""Manages in-progress upload temp files: token minting, lookup and offset writes."""

import base64
import json
import logging
import re
import time
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from common.constants import COMPLETION_MARKER_SUFFIX, TEMP_FILE_PREFIX, TEMP_NAME_HASH_LENGTH
from common.types import FileRecord
from server import config
from server.exceptions import StorageIOError, ValidationError

logger = logging.getLogger(__name__)

WRITE_PIECE_SIZE = 1024 * 1024

UPLOAD_ID_PATTERN = re.compile(
    rf"^{TEMP_FILE_PREFIX}([A-Za-z0-9]{{1,{TEMP_NAME_HASH_LENGTH}}})_(\d+)$"
)


def hash_file_name(file_name: str) -> str:
    """
    Derive the name component of a temp file from the original file name.

    Args:
        file_name: Original file name as sent by the client

    Returns:
        First 16 alphanumeric characters of the base64-encoded name
    """
    encoded = base64.b64encode(file_name.encode("utf-8")).decode("ascii")
    return re.sub(r"[^A-Za-z0-9]", "", encoded)[:TEMP_NAME_HASH_LENGTH] or "0"


def get_temp_dir(storage_root: Path) -> Path:
    """
    Get the temp directory for a storage root, creating it if missing.

    Args:
        storage_root: Resolved storage root

    Returns:
        Path of the temp directory
    """
    temp_dir = Path(storage_root) / config.TEMP_DIR_NAME
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError(f"Failed to create temp directory: {e}")
    return temp_dir


def mint_upload(temp_dir: Path, file_name: str, now_ms: Optional[int] = None) -> Tuple[str, Path]:
    """
    Create a fresh, empty temp file for a new upload.

    The file is created exclusively. If another upload of a file with the
    same name hash already claimed this millisecond, the timestamp is bumped
    until a free name is found.

    Args:
        temp_dir: Temp directory
        file_name: Original file name
        now_ms: Creation timestamp in milliseconds (defaults to now)

    Returns:
        Tuple of (upload_id, temp_path)

    Raises:
        StorageIOError: If the file cannot be created
    """
    name_hash = hash_file_name(file_name)
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)

    while True:
        upload_id = f"{TEMP_FILE_PREFIX}{name_hash}_{timestamp}"
        temp_path = temp_dir / upload_id
        try:
            with open(temp_path, "xb"):
                pass
        except FileExistsError:
            timestamp += 1
            continue
        except OSError as e:
            raise StorageIOError(f"Failed to create temp file for {file_name}: {e}")
        logger.debug(f"Minted upload {upload_id} for {file_name}")
        return upload_id, temp_path


def locate_upload(temp_dir: Path, upload_id: Optional[str], file_name: str) -> Path:
    """
    Resolve the temp file of an upload from its echoed token.

    Args:
        temp_dir: Temp directory
        upload_id: Token returned for chunk 0
        file_name: Original file name of this chunk

    Returns:
        Path of the temp file (which may no longer exist)

    Raises:
        ValidationError: If the token is missing, malformed or belongs to another file
    """
    if not upload_id:
        raise ValidationError("uploadId is required for every chunk after the first")

    match = UPLOAD_ID_PATTERN.match(upload_id)
    if not match:
        raise ValidationError(f"Malformed uploadId: '{upload_id}'")

    if match.group(1) != hash_file_name(file_name):
        raise ValidationError(f"uploadId '{upload_id}' does not belong to file '{file_name}'")

    return temp_dir / upload_id


def stream_length(stream: BinaryIO) -> int:
    """Return the byte length of a seekable stream and rewind it."""
    stream.seek(0, 2)
    length = stream.tell()
    stream.seek(0)
    return length


def compute_offset(
    chunk_index: int,
    chunk_size: Optional[int],
    data_length: int,
    is_final: bool,
    current_size: int
) -> int:
    """
    Compute where a chunk's bytes belong in the temp file.

    With a declared chunk size the offset is ``chunk_index * chunk_size``.
    Without one, non-final chunks are full-sized by construction so
    ``chunk_index * data_length`` is used; a final chunk can only be
    appended at the current end of file.

    Returns:
        Byte offset for the write
    """
    if chunk_index == 0:
        return 0
    if chunk_size:
        return chunk_index * chunk_size
    if not is_final:
        return chunk_index * data_length
    return current_size


def _iter_pieces(stream: BinaryIO, piece_size: int = WRITE_PIECE_SIZE) -> Iterator[bytes]:
    while True:
        piece = stream.read(piece_size)
        if not piece:
            break
        yield piece


def write_at(temp_path: Path, stream: BinaryIO, offset: int, truncate: bool = False) -> int:
    """
    Write a chunk's bytes into the temp file at a fixed offset.

    Rewriting the same chunk produces the same file, so retried or
    duplicated deliveries are harmless.

    Args:
        temp_path: Existing temp file
        stream: Chunk bytes
        offset: Byte offset to write at
        truncate: Cut the file at the end of this write (final chunk)

    Returns:
        Number of bytes written

    Raises:
        StorageIOError: If the write fails
    """
    written = 0
    try:
        with open(temp_path, "r+b") as f:
            f.seek(offset)
            for piece in _iter_pieces(stream):
                f.write(piece)
                written += len(piece)
            if truncate:
                f.truncate(offset + written)
    except OSError as e:
        raise StorageIOError(f"Failed to write {temp_path.name} at offset {offset}: {e}")
    return written


def get_marker_path(temp_dir: Path, upload_id: str) -> Path:
    return temp_dir / f"{upload_id}{COMPLETION_MARKER_SUFFIX}"


def write_completion_marker(temp_dir: Path, upload_id: str, record: FileRecord) -> None:
    """
    Remember the record of a finished upload so a repeated final chunk
    can be answered without finalizing twice. Failure is only logged.
    """
    marker = get_marker_path(temp_dir, upload_id)
    try:
        marker.write_text(json.dumps(record.to_dict()), encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to write completion marker for {upload_id}: {e}")


def read_completion_marker(temp_dir: Path, upload_id: str) -> Optional[FileRecord]:
    """
    Load the record of a finished upload, if one was remembered.

    Returns:
        FileRecord or None if there is no readable marker
    """
    marker = get_marker_path(temp_dir, upload_id)
    if not marker.exists():
        return None
    try:
        return FileRecord.from_dict(json.loads(marker.read_text(encoding="utf-8")))
    except (OSError, ValueError, KeyError) as e:
        logger.warning(f"Ignoring unreadable completion marker for {upload_id}: {e}")
        return None


def discard(temp_path: Path) -> None:
    """Remove a temp file, logging instead of raising on failure."""
    try:
        temp_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove temp file {temp_path.name}: {e}")
