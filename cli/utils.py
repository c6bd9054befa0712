"""Utility helpers for CLI uploads."""

import os
from typing import Callable, Optional


class ProgressFileWrapper:
    """File-like wrapper that reports how many bytes have been read."""

    def __init__(self, file_path: str, on_read: Optional[Callable[[int], None]] = None):
        """
        Initialize the progress file wrapper.

        Args:
            file_path: Path of the file to read
            on_read: Called with the running total of bytes read
        """
        self.file_path = file_path
        self.on_read = on_read
        self._file = open(file_path, 'rb')
        self._uploaded = 0

    def read(self, size: int = -1) -> bytes:
        """
        Read bytes from the file and report the running total.

        Args:
            size: Number of bytes to read (-1 or 0 for default chunk size)

        Returns:
            Bytes read from the file
        """
        data = self._file.read(size if size > 0 else 64 * 1024)
        if data:
            self._uploaded += len(data)
            if self.on_read is not None:
                self.on_read(self._uploaded)
        return data

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        position = self._file.seek(offset, whence)
        self._uploaded = position
        return position

    def tell(self) -> int:
        return self._file.tell()

    def fileno(self) -> int:
        return self._file.fileno()

    def close(self) -> None:
        """Close the underlying file."""
        if self._file:
            self._file.close()

    def __enter__(self) -> 'ProgressFileWrapper':
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and ensure file is closed."""
        self.close()
