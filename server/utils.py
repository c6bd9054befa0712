"""Utility helper functions for the upload server."""

import mimetypes
import uuid
from datetime import datetime, timezone
from typing import Optional

GENERIC_MIME_TYPE = "application/octet-stream"


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def timestamp_from_epoch(epoch_seconds: float) -> str:
    """Convert a file mtime to a UTC ISO timestamp."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat()


def resolve_mime_type(file_name: str, declared: Optional[str] = None) -> str:
    """
    Pick the MIME type for a stored file.

    A declared content type wins unless it is the generic octet-stream
    that browsers and chunk blobs send; otherwise guess from the extension.
    """
    if declared and declared != GENERIC_MIME_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or GENERIC_MIME_TYPE
