"""Business logic services."""

from server.services.upload_service import UploadService

__all__ = ["UploadService"]
