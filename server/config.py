"""Configuration settings for the upload server."""

import os
from common.constants import DEFAULT_CHUNK_SIZE, DEFAULT_SERVER_PORT


STORAGE_PATH = os.environ.get("NAS_STORAGE_PATH", os.path.join(os.getcwd(), "storage"))

TEMP_DIR_NAME = os.environ.get("NAS_TEMP_DIR_NAME", ".upload_tmp")

MAX_FILE_SIZE = os.environ.get("NAS_MAX_FILE_SIZE", "100MB")

MAX_TOTAL_UPLOADS = os.environ.get("NAS_MAX_TOTAL_UPLOADS", "10GB")

MAX_FILES_COUNT = int(os.environ.get("NAS_MAX_FILES_COUNT", "1000"))

CHUNK_SIZE = os.environ.get("NAS_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)

TEMP_MAX_AGE_SECONDS = int(os.environ.get("NAS_TEMP_MAX_AGE_SECONDS", str(24 * 3600)))

CLEANUP_INTERVAL_SECONDS = int(os.environ.get("NAS_CLEANUP_INTERVAL_SECONDS", "3600"))

SERVER_HOST = os.environ.get("NAS_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("NAS_PORT", str(DEFAULT_SERVER_PORT)))
