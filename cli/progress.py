"""Per-file upload progress reporting."""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

from common.sizes import format_size
from cli.constants import GREEN, RED, RESET


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class UploadProgress:
    """Snapshot of one file's upload, passed to progress callbacks."""

    file_index: int
    file_name: str
    progress: float
    uploaded: int
    total: int
    status: UploadStatus
    error: Optional[str] = None


ProgressCallback = Callable[[UploadProgress], None]


class ProgressReporter:
    """
    Turns upload events for one file into UploadProgress callbacks.

    Chunked uploads report chunk-count weighted progress: every chunk,
    including a short last one, advances the bar by the same amount.
    """

    def __init__(self, file_index: int, file_name: str, total: int, callback: Optional[ProgressCallback] = None):
        self.file_index = file_index
        self.file_name = file_name
        self.total = total
        self.callback = callback
        self.status = UploadStatus.PENDING

    def _emit(self, progress: float, uploaded: int, error: Optional[str] = None) -> None:
        if self.callback is None:
            return
        self.callback(UploadProgress(
            file_index=self.file_index,
            file_name=self.file_name,
            progress=progress,
            uploaded=uploaded,
            total=self.total,
            status=self.status,
            error=error,
        ))

    def pending(self) -> None:
        self.status = UploadStatus.PENDING
        self._emit(0.0, 0)

    def started(self) -> None:
        self.status = UploadStatus.UPLOADING
        self._emit(0.0, 0)

    def bytes_sent(self, uploaded: int) -> None:
        """Byte-level progress of a single whole-file request."""
        progress = (uploaded / self.total) * 100 if self.total else 100.0
        self._emit(min(progress, 100.0), min(uploaded, self.total))

    def chunk_done(self, uploaded_chunks: int, total_chunks: int) -> None:
        """Progress after a chunk was acknowledged by the server."""
        fraction = uploaded_chunks / total_chunks
        self._emit(fraction * 100, int(fraction * self.total))

    def completed(self) -> None:
        self.status = UploadStatus.COMPLETED
        self._emit(100.0, self.total)

    def failed(self, error: str) -> None:
        self.status = UploadStatus.ERROR
        self._emit(0.0, 0, error=error)


class ConsoleProgress:
    """Progress callback rendering one self-overwriting line per file."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def __call__(self, progress: UploadProgress) -> None:
        if progress.status == UploadStatus.PENDING:
            return

        if progress.status == UploadStatus.ERROR:
            self.stream.write(f"\rFailed {progress.file_name}: {RED}{progress.error}{RESET}\n")
        else:
            self.stream.write(
                f"\rUploading {progress.file_name}: {format_size(progress.uploaded)} / "
                f"{format_size(progress.total)} ({GREEN}{progress.progress:.1f}%{RESET})"
            )
            if progress.status == UploadStatus.COMPLETED:
                self.stream.write("\n")
        self.stream.flush()
