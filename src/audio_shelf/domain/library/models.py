"""
Audio library domain models.

Contains data structures for audio files and their sidecar metadata records.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple, Optional, Sequence

# Fields a client may merge into a metadata record
EDITABLE_FIELDS = ("title", "artist", "bpm", "tags")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def normalize_tags(value: Any) -> list[str]:
    """Coerce a stored or submitted tags value to an ordered list of strings.

    Accepts None, a comma-joined string, or a sequence. Items are stripped and
    empty items dropped; order is preserved.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        items = [str(value)]
    return [item.strip() for item in items if item.strip()]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class AudioFile(NamedTuple):
    """Represents an audio file inside the library directory."""

    filename: str
    path: Path
    extension: str  # lowercase, with leading dot
    size: int = 0
    upload_date: Optional[str] = None  # ISO-8601


class MetadataRecord(NamedTuple):
    """Sidecar metadata for one audio file.

    Persisted as ``<stem>.json`` next to the audio file. ``tags`` is always a
    list of strings once loaded; a bare ``MetadataRecord()`` starts with an
    empty tuple.
    """

    title: str = ""
    artist: str = ""
    bpm: str = ""
    tags: Sequence[str] = ()
    upload_date: Optional[str] = None
    last_modified_date: Optional[str] = None

    @classmethod
    def default(cls, now: Optional[str] = None) -> "MetadataRecord":
        now = now or utc_now_iso()
        return cls(tags=[], upload_date=now, last_modified_date=now)

    @classmethod
    def from_dict(cls, data: dict) -> "MetadataRecord":
        """Build a record from sidecar JSON, accepting legacy shapes."""
        tags = data.get("tags")
        if tags is None:
            tags = data.get("customTags")
        return cls(
            title=_as_text(data.get("title")),
            artist=_as_text(data.get("artist")),
            bpm=_as_text(data.get("bpm")),
            tags=normalize_tags(tags),
            upload_date=data.get("uploadDate"),
            last_modified_date=data.get("lastModifiedDate"),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "artist": self.artist,
            "bpm": self.bpm,
            "tags": list(self.tags),
            "uploadDate": self.upload_date,
            "lastModifiedDate": self.last_modified_date,
        }

    def merge(self, fields: dict, now: Optional[str] = None) -> "MetadataRecord":
        """Return a copy with the editable ``fields`` applied.

        Keys outside title/artist/bpm/tags are ignored. ``lastModifiedDate`` is
        always bumped.
        """
        updates: dict[str, Any] = {}
        for key in EDITABLE_FIELDS:
            if key not in fields:
                continue
            if key == "tags":
                updates["tags"] = normalize_tags(fields["tags"])
            else:
                updates[key] = _as_text(fields[key])
        updates["last_modified_date"] = now or utc_now_iso()
        return self._replace(**updates)


class IntrinsicMetadata(NamedTuple):
    """Metadata embedded in or derived from the audio bytes."""

    title: Optional[str] = None
    artist: Optional[str] = None
    bpm: Optional[str] = None
    duration: Optional[float] = None  # in seconds


class MetadataView(NamedTuple):
    """Merged view returned by a metadata read."""

    title: str
    artist: str
    bpm: str
    duration: float
    tags: list[str]

    @classmethod
    def combine(
        cls, record: MetadataRecord, intrinsic: IntrinsicMetadata
    ) -> "MetadataView":
        """Sidecar fields win when non-empty, then embedded tags, then empty."""
        return cls(
            title=record.title or intrinsic.title or "",
            artist=record.artist or intrinsic.artist or "",
            bpm=record.bpm or intrinsic.bpm or "",
            duration=intrinsic.duration or 0,
            tags=list(record.tags),
        )
