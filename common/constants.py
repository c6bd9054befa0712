"""Project-wide constants shared by the upload server and the CLI client."""

MIN_CHUNK_SIZE_BYTES: int = 1024 * 1024  # 1 MiB floor for the chunk threshold
DEFAULT_CHUNK_SIZE: str = "5MB"

MAX_CHUNK_ATTEMPTS: int = 3
RETRY_DELAY_SECONDS: float = 1.0

TEMP_FILE_PREFIX: str = "temp_"
TEMP_NAME_HASH_LENGTH: int = 16
COMPLETION_MARKER_SUFFIX: str = ".done"

DEFAULT_SERVER_PORT: int = 3000
UPLOAD_ENDPOINT: str = "/api/upload"
