"""Background task for reaping orphaned upload temp files."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from common.constants import COMPLETION_MARKER_SUFFIX, TEMP_FILE_PREFIX
from server import config

logger = logging.getLogger(__name__)


class TempFileReaper:
    """
    Background task that periodically deletes temp files and completion
    markers older than a maximum age.

    A temp file's mtime moves with every chunk written, so an upload that is
    still receiving chunks is never considered old.
    """

    def __init__(
        self,
        interval_seconds: Optional[int] = None,
        max_age_seconds: Optional[int] = None,
        storage_root: Optional[str] = None
    ):
        """
        Initialize reaper task.

        Args:
            interval_seconds: Time between sweeps (default CLEANUP_INTERVAL_SECONDS)
            max_age_seconds: Age after which a temp file is an orphan (default TEMP_MAX_AGE_SECONDS)
            storage_root: Storage root holding the temp directory (default STORAGE_PATH)
        """
        self.interval_seconds = interval_seconds or config.CLEANUP_INTERVAL_SECONDS
        self.max_age_seconds = max_age_seconds if max_age_seconds is not None else config.TEMP_MAX_AGE_SECONDS
        self.storage_root = Path(storage_root or config.STORAGE_PATH)
        self._running = False
        self._task = None

    @property
    def temp_dir(self) -> Path:
        return self.storage_root / config.TEMP_DIR_NAME

    async def start(self) -> None:
        """Start the background reaper task."""
        if self._running:
            logger.warning("Temp file reaper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started temp file reaper (interval: {self.interval_seconds}s, max age: {self.max_age_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background reaper task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped temp file reaper")

    async def _run(self) -> None:
        """Main loop for reaper task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.sweep)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in temp file reaper: {e}", exc_info=True)

    def _is_reapable(self, path: Path) -> bool:
        return path.is_file() and (
            path.name.startswith(TEMP_FILE_PREFIX) or path.name.endswith(COMPLETION_MARKER_SUFFIX)
        )

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Delete orphaned temp files and stale completion markers once.

        Args:
            now: Reference time in epoch seconds (defaults to current time)

        Returns:
            Number of files removed
        """
        if not self.temp_dir.is_dir():
            logger.debug("No temp directory found")
            return 0

        cutoff = (now if now is not None else time.time()) - self.max_age_seconds
        removed = 0
        kept = 0

        for path in self.temp_dir.iterdir():
            if not self._is_reapable(path):
                continue
            try:
                if path.stat().st_mtime >= cutoff:
                    kept += 1
                    continue
                path.unlink()
                removed += 1
                logger.info(f"Removed orphaned temp file {path.name}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to remove orphaned temp file {path.name}: {e}")

        logger.info(f"Temp file sweep complete: {removed} removed, {kept} still active")
        return removed
