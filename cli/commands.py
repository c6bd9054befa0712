"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import List, Optional

from common.logging_config import get_logger
from common.types import FileRecord
from cli.config import Config
from cli.exceptions import BatchUploadError, UploadError
from cli.models import CleanupCommand, StatusCommand, UploadCommand
from cli.nas_client import NasClient
from cli.progress import ConsoleProgress

logger = get_logger(__name__)


_client: Optional[NasClient] = None


def get_client() -> NasClient:
    """
    Get or create global NasClient instance.

    Returns:
        NasClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new NasClient instance")
        config = Config(Path.home() / '.lannas' / 'config.json')
        _client = NasClient(config)
    return _client


def _format_records(records: List[FileRecord]) -> List[str]:
    lines = []
    for record in records:
        line = f"Uploaded: {record.relative_path} ({record.size_formatted})"
        if record.name != record.original_name:
            line += f" [renamed from {record.original_name}]"
        lines.append(line)
    return lines


def handle_upload(cmd: UploadCommand, client: Optional[NasClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file_list and optional upload_path
        client: Optional NasClient for dependency injection (testing)

    Returns:
        One line per uploaded file, plus one per failure
    """
    logger.info(f"Executing upload command: {len(cmd.file_list)} files, upload_path={cmd.upload_path}")
    if client is None:
        client = get_client()

    try:
        records = client.upload_files(list(cmd.file_list), cmd.upload_path, on_progress=ConsoleProgress())
    except BatchUploadError as e:
        lines = _format_records(e.uploaded)
        lines.extend(f"Error: {path}: {reason}" for path, reason in e.failures.items())
        lines.append(f"{e} ({len(e.failures)} of {len(cmd.file_list)} failed)")
        return "\n".join(lines)
    except UploadError as e:
        return f"Error: {e}"

    return "\n".join(_format_records(records))


def handle_status(cmd: StatusCommand, client: Optional[NasClient] = None) -> str:
    """
    Handle 'status' command.

    Returns:
        Server upload configuration, one setting per line
    """
    if client is None:
        client = get_client()

    try:
        status = client.get_status()
    except UploadError as e:
        return f"Error: {e}"

    server_config = status.get('config', {})
    accessible = "yes" if status.get('storageAccessible') else "no"
    return "\n".join([
        status.get('message', 'Upload endpoint is working'),
        f"Storage path: {server_config.get('storagePath', '?')} (accessible: {accessible})",
        f"Max file size: {server_config.get('maxFileSize', '?')}",
        f"Max total uploads: {server_config.get('maxTotalUploads', '?')}",
        f"Max files per request: {server_config.get('maxFilesCount', '?')}",
        f"Server chunk size: {server_config.get('chunkSize', '?')}",
    ])


def handle_cleanup(cmd: CleanupCommand, client: Optional[NasClient] = None) -> str:
    """
    Handle 'cleanup' command.

    Returns:
        Number of temp files removed on the server
    """
    logger.info(f"Executing cleanup command: max_age_seconds={cmd.max_age_seconds}")
    if client is None:
        client = get_client()

    try:
        removed = client.cleanup(cmd.max_age_seconds)
    except UploadError as e:
        return f"Error: {e}"

    return f"Cleanup completed, removed {removed} temp file(s)"
