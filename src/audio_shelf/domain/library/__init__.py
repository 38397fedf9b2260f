"""Library domain - audio files and their sidecar metadata.

This domain handles:
- Audio file and metadata record models
- Sidecar JSON persistence
- Intrinsic metadata extraction and ID3 mirroring
- The library store and its batch operations
"""

# Models
from .models import (
    AudioFile,
    IntrinsicMetadata,
    MetadataRecord,
    MetadataView,
    normalize_tags,
)

# Errors
from .exceptions import (
    LibraryError,
    NotFoundError,
    BadRequestError,
    UnsupportedFormatError,
    StoreIOError,
    MetadataReadError,
    ArchiveError,
    UploadTooLargeError,
)

# Metadata extraction and tag mirroring
from .metadata import (
    extract_audio_metadata,
    format_tags_comment,
    write_id3_tags,
)

# Store
from .store import LibraryStore

__all__ = [
    # Models
    "AudioFile",
    "IntrinsicMetadata",
    "MetadataRecord",
    "MetadataView",
    "normalize_tags",
    # Errors
    "LibraryError",
    "NotFoundError",
    "BadRequestError",
    "UnsupportedFormatError",
    "StoreIOError",
    "MetadataReadError",
    "ArchiveError",
    "UploadTooLargeError",
    # Metadata
    "extract_audio_metadata",
    "format_tags_comment",
    "write_id3_tags",
    # Store
    "LibraryStore",
]
