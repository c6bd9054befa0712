"""HTTP client for uploading files to the LAN NAS server."""

import mimetypes
import os
import time
from typing import Callable, Dict, List, Optional

import httpx

from common.constants import UPLOAD_ENDPOINT
from common.logging_config import get_logger
from common.types import FileRecord
from cli.chunk_planner import chunk_threshold, needs_chunking, plan_chunks
from cli.config import Config
from cli.exceptions import BatchUploadError, ChunkUploadError, NetworkError, UploadError
from cli.progress import ProgressCallback, ProgressReporter
from cli.utils import ProgressFileWrapper

logger = get_logger(__name__)


class NasClient:
    """HTTP client for the upload API with chunking and per-chunk retries."""

    def __init__(self, config: Config, sleep: Callable[[float], None] = time.sleep):
        """
        Initialize NAS client.

        Args:
            config: Configuration instance
            sleep: Used to wait between chunk attempts
        """
        self.config = config
        self.sleep = sleep
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        logger.info(f"Initialized NasClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, size: int) -> float:
        """
        Calculate timeout for a request body of the given size.

        Args:
            size: Body size in bytes

        Returns:
            Timeout in seconds (30s base + 0.1s per MB)
        """
        base_timeout = 30.0
        size_mb = size / (1024 * 1024)
        return base_timeout + size_mb * 0.1

    def _describe_transport_error(self, error: httpx.TransportError) -> str:
        if isinstance(error, httpx.ConnectError):
            return "Cannot connect to NAS server. Is it running?"
        if isinstance(error, httpx.TimeoutException):
            return "Request timed out. Server may be overloaded."
        return f"Network error: {error}"

    def _parse_json(self, response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        error_data = self._parse_json(response)
        detail = error_data.get('error') or response.text or 'Unknown error'
        code = error_data.get('code', 'UNKNOWN')

        error_messages = {
            'INVALID_PATH': 'Invalid destination path',
            'VALIDATION_ERROR': 'Upload rejected by server',
            'UPLOAD_SESSION_NOT_FOUND': 'Upload session is unknown or expired on the server',
            'STORAGE_UNAVAILABLE': 'Server storage is currently unavailable. Please try again later',
            'STORAGE_IO_ERROR': 'Server failed to write the file',
        }

        if code in error_messages:
            return f"{error_messages[code]}: {detail}"

        status_messages = {
            400: 'Bad request',
            404: 'Not found',
            413: 'File too large',
            422: 'Malformed request',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def upload_files(
        self,
        file_paths: List[str],
        upload_path: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[FileRecord]:
        """
        Upload files one after another.

        A failing file does not stop the batch; the remaining files are
        still attempted and the failure is reported at the end.

        Args:
            file_paths: Local files to upload
            upload_path: Destination directory on the server (config default if None)
            on_progress: Receives an UploadProgress for every progress event

        Returns:
            Records of the stored files, in input order

        Raises:
            BatchUploadError: If at least one file failed
        """
        upload_path = upload_path or self.config.get_upload_path()
        reporters = [
            ProgressReporter(i, os.path.basename(path), self._safe_size(path), on_progress)
            for i, path in enumerate(file_paths)
        ]
        for reporter in reporters:
            reporter.pending()

        records: List[FileRecord] = []
        failures: Dict[str, str] = {}

        for file_path, reporter in zip(file_paths, reporters):
            try:
                records.append(self.upload_file(file_path, upload_path, reporter))
            except UploadError as e:
                logger.error(f"Upload of {file_path} failed: {e}")
                failures[file_path] = str(e)
                reporter.failed(str(e))

        if failures:
            raise BatchUploadError(records, failures)
        return records

    def _safe_size(self, file_path: str) -> int:
        try:
            return os.path.getsize(file_path)
        except OSError:
            return 0

    def upload_file(
        self,
        file_path: str,
        upload_path: Optional[str] = None,
        reporter: Optional[ProgressReporter] = None
    ) -> FileRecord:
        """
        Upload a single file, in chunks when it exceeds the chunk size.

        Raises:
            UploadError: If the file is unreadable or the server refused it
            NetworkError: If a whole-file request could not reach the server
            ChunkUploadError: If a chunk failed on every attempt
        """
        if not os.path.isfile(file_path):
            raise UploadError(f"File not found: {file_path}")

        upload_path = upload_path or self.config.get_upload_path()
        file_name = os.path.basename(file_path)
        file_size = os.path.getsize(file_path)
        reporter = reporter or ProgressReporter(0, file_name, file_size)
        chunk_size = chunk_threshold(self.config.get_chunk_size())

        reporter.started()
        try:
            if needs_chunking(file_size, chunk_size):
                record = self._upload_large_file(file_path, file_name, file_size, chunk_size, upload_path, reporter)
            else:
                record = self._upload_small_file(file_path, file_name, file_size, upload_path, reporter)
        except OSError as e:
            raise UploadError(f"Cannot read {file_path}: {e}")

        reporter.completed()
        logger.info(f"Uploaded {file_name} as {record.relative_path} ({record.size_formatted})")
        return record

    def _upload_small_file(
        self,
        file_path: str,
        file_name: str,
        file_size: int,
        upload_path: str,
        reporter: ProgressReporter
    ) -> FileRecord:
        """Send a file in a single request. Not retried."""
        content_type = mimetypes.guess_type(file_name)[0] or 'application/octet-stream'

        with ProgressFileWrapper(file_path, on_read=reporter.bytes_sent) as wrapper:
            try:
                response = self.session.post(
                    UPLOAD_ENDPOINT,
                    data={'path': upload_path},
                    files={'files': (file_name, wrapper, content_type)},
                    timeout=self._calculate_upload_timeout(file_size)
                )
            except httpx.TransportError as e:
                raise NetworkError(self._describe_transport_error(e))

        if not response.is_success:
            raise UploadError(self._format_error(response))

        data = self._parse_json(response)
        if data.get('success') is not True or not data.get('files'):
            raise UploadError(data.get('error') or f"Server did not store {file_name}")

        return FileRecord.from_dict(data['files'][0])

    def _upload_large_file(
        self,
        file_path: str,
        file_name: str,
        file_size: int,
        chunk_size: int,
        upload_path: str,
        reporter: ProgressReporter
    ) -> FileRecord:
        """
        Send a file as sequential chunks.

        Chunk 0 returns the upload token that every later chunk echoes.
        """
        chunks = plan_chunks(file_size, chunk_size)
        total = len(chunks)
        upload_id = None
        body: dict = {}

        logger.info(f"Uploading {file_name} in {total} chunks of {chunk_size} bytes")

        with open(file_path, 'rb') as f:
            for spec in chunks:
                f.seek(spec.start)
                payload = f.read(spec.length)

                data = {
                    'path': upload_path,
                    'chunkIndex': str(spec.index),
                    'totalChunks': str(total),
                    'fileName': file_name,
                    'chunkSize': str(chunk_size),
                }
                if upload_id:
                    data['uploadId'] = upload_id

                body = self._send_chunk(spec.index, data, file_name, payload)

                if spec.index == 0:
                    upload_id = body.get('uploadId')
                    if not upload_id:
                        raise UploadError(f"Server did not return an uploadId for {file_name}")

                reporter.chunk_done(spec.index + 1, total)

        if not body.get('completed') or not body.get('files'):
            raise UploadError(f"Server did not complete the upload of {file_name}")

        return FileRecord.from_dict(body['files'][0])

    def _send_chunk(self, chunk_index: int, data: dict, file_name: str, payload: bytes) -> dict:
        """
        POST one chunk, retrying with a linearly growing delay.

        Returns:
            Parsed response body of the first successful attempt

        Raises:
            ChunkUploadError: After the last attempt failed
        """
        retry_config = self.config.get_retry_config()
        max_attempts = max(1, int(retry_config['max_retries']))
        delay = float(retry_config['retry_delay_seconds'])
        reason = 'Unknown error'

        for attempt in range(1, max_attempts + 1):
            try:
                response = self.session.post(
                    UPLOAD_ENDPOINT,
                    data=data,
                    files={'files': (file_name, payload, 'application/octet-stream')},
                    timeout=self._calculate_upload_timeout(len(payload))
                )
            except httpx.TransportError as e:
                reason = self._describe_transport_error(e)
            else:
                if response.is_success:
                    body = self._parse_json(response)
                    if body.get('success') is True:
                        return body
                    reason = body.get('error') or 'Server reported failure'
                else:
                    reason = self._format_error(response)

            if attempt < max_attempts:
                wait = attempt * delay
                logger.warning(
                    f"Chunk {chunk_index} of {file_name} failed (attempt {attempt}/{max_attempts}): "
                    f"{reason}, retrying in {wait}s"
                )
                self.sleep(wait)

        logger.error(f"Chunk {chunk_index} of {file_name} failed after {max_attempts} attempts: {reason}")
        raise ChunkUploadError(chunk_index, max_attempts, reason)

    def get_status(self) -> dict:
        """
        Fetch upload configuration and storage state from the server.

        Raises:
            NetworkError: If the server could not be reached
            UploadError: On a non-2xx response
        """
        try:
            response = self.session.get(UPLOAD_ENDPOINT)
        except httpx.TransportError as e:
            raise NetworkError(self._describe_transport_error(e))

        if not response.is_success:
            raise UploadError(self._format_error(response))
        return self._parse_json(response)

    def cleanup(self, max_age_seconds: Optional[int] = None) -> int:
        """
        Ask the server to delete orphaned temp files.

        Args:
            max_age_seconds: Override the server's orphan age

        Returns:
            Number of temp files removed
        """
        params = {}
        if max_age_seconds is not None:
            params['maxAgeSeconds'] = max_age_seconds

        try:
            response = self.session.delete(UPLOAD_ENDPOINT, params=params)
        except httpx.TransportError as e:
            raise NetworkError(self._describe_transport_error(e))

        if not response.is_success:
            raise UploadError(self._format_error(response))
        return int(self._parse_json(response).get('removed', 0))

    def close(self) -> None:
        """Close HTTP session."""
        self.session.close()
