"""Exceptions raised by the upload client."""

from typing import Dict, List

from common.types import FileRecord


class UploadError(Exception):
    """
    Raised when a single file could not be uploaded.
    """
    pass


class NetworkError(UploadError):
    """
    Raised when the server could not be reached or the connection dropped.
    """
    pass


class ChunkUploadError(UploadError):
    """
    Raised when one chunk failed on every attempt. No later chunks of the
    file were sent; bytes already accepted by the server are not rolled back.
    """

    def __init__(self, chunk_index: int, attempts: int, reason: str):
        self.chunk_index = chunk_index
        self.attempts = attempts
        self.reason = reason
        super().__init__(f"Chunk {chunk_index} failed after {attempts} attempts: {reason}")


class BatchUploadError(UploadError):
    """
    Raised after a batch in which at least one file failed. Files that
    succeeded stay uploaded and are listed in ``uploaded``.
    """

    def __init__(self, uploaded: List[FileRecord], failures: Dict[str, str]):
        self.uploaded = uploaded
        self.failures = failures
        super().__init__("Some files failed to upload")
