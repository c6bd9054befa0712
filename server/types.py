"""Server-side request and result types for the upload flow."""

from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from common.types import FileRecord


@dataclass
class IncomingFile:
    """
    One whole file received in a non-chunked upload request.
    """
    file_name: str
    stream: BinaryIO
    content_type: Optional[str] = None


@dataclass
class ChunkRequest:
    """
    One chunk of a chunked upload as received on the wire.

    ``upload_id`` is required for every chunk after the first;
    ``chunk_size`` is the planner's chunk size used to place the bytes.
    """
    stream: BinaryIO
    chunk_index: int
    total_chunks: int
    file_name: str
    upload_path: str = "/"
    upload_id: Optional[str] = None
    chunk_size: Optional[int] = None
    content_type: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.chunk_index == self.total_chunks - 1


@dataclass(frozen=True)
class ChunkResult:
    """
    Outcome of a processed chunk. ``record`` is only set once completed.
    """
    upload_id: str
    chunk_index: int
    total_chunks: int
    upload_path: str
    completed: bool
    record: Optional[FileRecord] = None


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of a whole-file upload request.
    """
    upload_path: str
    files: List[FileRecord] = field(default_factory=list)
