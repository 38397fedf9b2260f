"""Library store exceptions for error handling.

Each error carries the HTTP status the web layer answers with.
"""

from typing import Optional


class LibraryError(Exception):
    """Base exception for library store operations."""

    status_code = 500
    error = "Library operation failed"

    def __init__(self, message: str = None, error: Optional[str] = None):
        super().__init__(message or self.error)
        if error:
            self.error = error

    @property
    def details(self) -> str:
        return str(self)


class NotFoundError(LibraryError):
    """Raised when the audio file does not exist."""

    status_code = 404
    error = "File not found"


class BadRequestError(LibraryError):
    """Raised when required fields are missing or a filename is invalid."""

    status_code = 400
    error = "Bad request"


class UnsupportedFormatError(BadRequestError):
    """Raised when a name that is not an mp3 or wav file is used as audio."""

    status_code = 400
    error = "Unsupported format"


class StoreIOError(LibraryError):
    """Raised when a filesystem operation fails.

    ``side`` names which half of the audio/sidecar pair failed.
    """

    status_code = 500
    error = "Filesystem operation failed"

    def __init__(
        self, message: str = None, side: Optional[str] = None, error: Optional[str] = None
    ):
        self.side = side
        super().__init__(message, error)


class MetadataReadError(LibraryError):
    """Raised when intrinsic metadata cannot be extracted from the audio."""

    status_code = 500
    error = "Unable to read metadata"


class ArchiveError(LibraryError):
    """Raised when the zip archive cannot be built."""

    status_code = 500
    error = "Unable to build archive"


class UploadTooLargeError(BadRequestError):
    """Raised when an uploaded file exceeds the configured size limit."""

    status_code = 413
    error = "File too large"
