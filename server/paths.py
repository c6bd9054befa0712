"""Destination path resolution confined to the storage root."""

import logging
import os
from pathlib import Path

from server.exceptions import InvalidPathError, StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def ensure_storage_root(storage_root: Path) -> Path:
    """
    Check that the storage root exists and is a usable directory.

    Raises:
        StorageUnavailableError: If the directory is missing or not accessible
    """
    root = Path(storage_root)
    if not root.is_dir() or not os.access(root, os.R_OK | os.W_OK | os.X_OK):
        raise StorageUnavailableError(f"Storage directory {root} is not accessible")
    return root.resolve()


def resolve_destination(storage_root: Path, upload_path: str) -> Path:
    """
    Resolve a client-supplied directory to a canonical path inside the root.

    Leading slashes, repeated separators and backslashes are normalised;
    any path whose canonical form escapes the root is rejected instead of
    being silently rewritten.

    Args:
        storage_root: Resolved storage root
        upload_path: Directory relative to the root (e.g. "/Documents")

    Returns:
        Absolute destination directory

    Raises:
        InvalidPathError: If the path escapes the storage root
    """
    cleaned = (upload_path or "/").replace("\\", "/").strip()
    relative = cleaned.lstrip("/")

    candidate = (storage_root / relative).resolve()
    try:
        candidate.relative_to(storage_root)
    except ValueError:
        logger.warning(f"Rejected destination outside storage root: {upload_path!r}")
        raise InvalidPathError(f"Invalid path: '{upload_path}' is outside the storage directory")

    return candidate


def to_relative_path(storage_root: Path, path: Path) -> str:
    """Express a path under the root as "/a/b" for client display."""
    relative = Path(path).relative_to(storage_root).as_posix()
    return "/" if relative == "." else f"/{relative}"


def ensure_directory(directory: Path) -> None:
    """Create a directory and its parents if missing (idempotent)."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except FileExistsError:
        raise InvalidPathError(f"Destination {directory.name} exists and is not a directory")
    except OSError as e:
        raise StorageUnavailableError(f"Failed to create upload directory: {e}")


def sanitize_file_name(file_name: str) -> str:
    """
    Reduce a client-supplied file name to a bare base name.

    Raises:
        ValidationError: If nothing usable remains
    """
    if file_name is None or not file_name.strip():
        raise ValidationError("fileName must be a non-empty string")

    base = file_name.replace("\\", "/").strip().split("/")[-1].strip()
    if base in ("", ".", "..") or "\x00" in base:
        raise ValidationError(f"Invalid file name: '{file_name}'")
    return base
