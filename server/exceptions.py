"""Custom exception classes for the upload server."""


class NasException(Exception):
    """
    Base exception class for all upload-server errors.
    """
    pass


class ValidationError(NasException):
    """
    Raised when an upload request carries an invalid chunk index,
    chunk count, file name or upload id. Nothing is written.
    """
    pass


class InvalidPathError(ValidationError):
    """
    Raised when a destination path resolves outside the storage root.
    """
    pass


class UploadSessionNotFoundError(NasException):
    """
    Raised when a continuation chunk names an upload whose temp file
    no longer exists.
    """
    pass


class StorageUnavailableError(NasException):
    """
    Raised when the storage root is missing or not accessible.
    """
    pass


class StorageIOError(NasException):
    """
    Raised when writing, renaming or copying an upload fails on disk.
    Bytes already written to the temp file are left in place.
    """
    pass
