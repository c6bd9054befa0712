"""Client settings for the LAN NAS CLI, persisted as JSON."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from common.constants import DEFAULT_CHUNK_SIZE, DEFAULT_SERVER_PORT, MAX_CHUNK_ATTEMPTS, RETRY_DELAY_SECONDS

logger = logging.getLogger(__name__)


def _default_settings() -> Dict[str, Any]:
    return {
        "server_host": os.environ.get("NAS_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("NAS_SERVER_PORT", str(DEFAULT_SERVER_PORT))),
        "timeout": 30,
        "max_retries": MAX_CHUNK_ATTEMPTS,
        "retry_delay_seconds": RETRY_DELAY_SECONDS,
        "chunk_size": DEFAULT_CHUNK_SIZE,
        "upload_path": "/",
    }


class Config:
    """
    Settings file for the upload client.

    Keys missing from the file fall back to defaults, so older files keep
    working when settings are added. An unreadable file is copied to
    ``config.json.bak`` and replaced by defaults in memory.
    """

    def __init__(self, config_path: Path):
        """
        Args:
            config_path: Path to config JSON file (typically ~/.lannas/config.json)
        """
        self.config_path = self._usable_path(Path(config_path))
        self.data = _default_settings()

        if self.config_path.exists():
            self.data.update(self._read())
        else:
            self.save()

    @staticmethod
    def _usable_path(config_path: Path) -> Path:
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            return config_path
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.lannas' / config_path.name
            fallback.parent.mkdir(parents=True, exist_ok=True)
            logger.warning(f"Cannot create {config_path.parent}, using {fallback}")
            return fallback

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r') as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("top-level value is not an object")
            return stored
        except (OSError, ValueError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Config file {self.config_path} unreadable ({e}), backing up to {backup_path}")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Config backup failed: {copy_error}")
            return {}

    def save(self) -> None:
        """Write current settings to the config file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_base_url(self) -> str:
        """
        Returns:
            Server base URL (e.g. "http://localhost:3000")
        """
        return f"http://{self.data['server_host']}:{self.data['server_port']}"

    def get_timeout(self) -> float:
        return self.data['timeout']

    def get_retry_config(self) -> dict:
        """
        Returns:
            'max_retries': total attempts per chunk;
            'retry_delay_seconds': base of the linear backoff between attempts
        """
        return {
            'max_retries': self.data['max_retries'],
            'retry_delay_seconds': self.data['retry_delay_seconds'],
        }

    def get_chunk_size(self) -> str:
        """Chunk size as configured text, e.g. "5MB"."""
        return self.data['chunk_size']

    def get_upload_path(self) -> str:
        return self.data['upload_path'] or '/'

    def set_upload_path(self, upload_path: Optional[str]) -> None:
        """Change the default destination directory and persist it."""
        self.data['upload_path'] = upload_path or '/'
        self.save()
