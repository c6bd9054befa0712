"""Promotes a completed temp file to its final, collision-free name."""

import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Optional

from common.sizes import format_size
from common.types import FileRecord
from server.exceptions import StorageIOError
from server.paths import to_relative_path
from server.utils import generate_uuid, resolve_mime_type, timestamp_from_epoch

logger = logging.getLogger(__name__)

# Guards name probing and promotion together so two finalizations in this
# process cannot both claim the same free name.
_promotion_lock = threading.Lock()


def candidate_name(file_name: str, counter: int) -> str:
    """
    Build the n-th alternative for a taken file name.

    Args:
        file_name: Requested name (e.g. "report.pdf")
        counter: 0 for the name itself, then 1, 2, 3, ...

    Returns:
        "report.pdf", "report_1.pdf", "report_2.pdf", ...
    """
    if counter == 0:
        return file_name
    base, ext = os.path.splitext(file_name)
    return f"{base}_{counter}{ext}"


def resolve_unique_name(directory: Path, file_name: str) -> str:
    """
    Find the first name in the ``name, name_1, name_2, ...`` sequence that
    is free in a directory.
    """
    counter = 0
    while (directory / candidate_name(file_name, counter)).exists():
        counter += 1
    return candidate_name(file_name, counter)


def _copy_then_delete(temp_path: Path, final_path: Path) -> None:
    """Fallback promotion for when a rename is not possible."""
    try:
        with open(temp_path, "rb") as src, open(final_path, "xb") as dst:
            shutil.copyfileobj(src, dst, length=1024 * 1024)
    except OSError as e:
        if final_path.exists() and not isinstance(e, FileExistsError):
            final_path.unlink(missing_ok=True)
        raise StorageIOError(f"Failed to copy upload into {final_path.name}: {e}")

    try:
        temp_path.unlink()
    except OSError as e:
        logger.warning(f"Promoted {final_path.name} but could not remove temp file {temp_path.name}: {e}")


def promote_temp_file(temp_path: Path, directory: Path, file_name: str) -> Path:
    """
    Move a completed temp file into the destination directory.

    Never overwrites an existing file. A rename is tried first; if the
    filesystem refuses it (e.g. temp dir on another device) the file is
    copied and the temp file deleted.

    Args:
        temp_path: Fully written temp file
        directory: Destination directory
        file_name: Requested final name

    Returns:
        Path of the promoted file

    Raises:
        StorageIOError: If neither rename nor copy succeeds
    """
    with _promotion_lock:
        final_name = resolve_unique_name(directory, file_name)
        final_path = directory / final_name

        try:
            os.rename(temp_path, final_path)
        except FileNotFoundError as e:
            raise StorageIOError(f"Temp file for {file_name} disappeared before promotion: {e}")
        except OSError as e:
            logger.warning(f"Rename of {temp_path.name} failed ({e}), falling back to copy")
            _copy_then_delete(temp_path, final_path)

    if final_name != file_name:
        logger.info(f"Name {file_name} taken, stored as {final_name}")
    return final_path


def build_file_record(
    storage_root: Path,
    final_path: Path,
    original_name: str,
    content_type: Optional[str] = None
) -> FileRecord:
    """
    Describe a promoted file from a fresh stat of it.

    Args:
        storage_root: Resolved storage root
        final_path: Promoted file
        original_name: Name the client asked for
        content_type: Content type declared by the client, if any

    Returns:
        FileRecord for the response
    """
    try:
        stat = final_path.stat()
    except OSError as e:
        raise StorageIOError(f"Failed to stat {final_path.name}: {e}")

    return FileRecord(
        id=generate_uuid(),
        name=final_path.name,
        original_name=original_name,
        size=stat.st_size,
        mime_type=resolve_mime_type(final_path.name, content_type),
        relative_path=to_relative_path(storage_root, final_path),
        uploaded_at=timestamp_from_epoch(stat.st_mtime),
        size_formatted=format_size(stat.st_size),
    )
