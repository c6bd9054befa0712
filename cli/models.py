"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files to a server directory."""

    file_list: tuple[str, ...]
    upload_path: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class StatusCommand:
    """Show server upload configuration."""

    command: Literal["status"] = "status"


@dataclass(frozen=True)
class CleanupCommand:
    """Remove orphaned temp files on the server."""

    max_age_seconds: int | None = None
    command: Literal["cleanup"] = "cleanup"


CommandRequest = UploadCommand | StatusCommand | CleanupCommand
