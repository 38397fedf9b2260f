from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional

from audio_shelf.domain.library import (
    AudioFile,
    MetadataRecord,
    MetadataView,
    normalize_tags,
)


class UploadedFile(BaseModel):
    filename: str
    size: int
    extension: str
    uploadDate: Optional[str] = None

    @classmethod
    def from_audio(cls, audio: AudioFile) -> "UploadedFile":
        return cls(
            filename=audio.filename,
            size=audio.size,
            extension=audio.extension,
            uploadDate=audio.upload_date,
        )


class UploadResponse(BaseModel):
    message: str
    files: list[UploadedFile]


class AudioListEntry(BaseModel):
    file: str
    customTags: list[str]


class MetadataResponse(BaseModel):
    title: str
    artist: str
    bpm: str
    duration: float
    tags: list[str]

    @classmethod
    def from_view(cls, view: MetadataView) -> "MetadataResponse":
        return cls(**view._asdict())


class MetadataUpdate(BaseModel):
    """Partial metadata; only the fields sent are merged."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    artist: Optional[str] = None
    bpm: Optional[str] = None
    tags: Optional[list[str]] = None  # comma-joined string accepted

    @field_validator("title", "artist", "bpm", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        # bpm often arrives as a number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value: Any) -> Any:
        if isinstance(value, (str, list, tuple)):
            return normalize_tags(value)
        return value

    def fields(self) -> dict:
        """The submitted fields, ready for a store merge."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class StoredMetadata(BaseModel):
    title: str
    artist: str
    bpm: str
    tags: list[str]
    uploadDate: Optional[str] = None
    lastModifiedDate: Optional[str] = None

    @classmethod
    def from_record(cls, record: MetadataRecord) -> "StoredMetadata":
        return cls(**record.to_dict())


class MetadataUpdateResponse(BaseModel):
    message: str
    updatedMetadata: StoredMetadata


class FilenamesRequest(BaseModel):
    filenames: list[str] = Field(default_factory=list)


class BatchMetadataRequest(BaseModel):
    filenames: list[str] = Field(default_factory=list)
    metadata: MetadataUpdate = Field(default_factory=MetadataUpdate)


class BatchMetadataResponse(BaseModel):
    message: str
    updated: list[str]


class MessageResponse(BaseModel):
    message: str


class ReplaceResponse(BaseModel):
    message: str
    filePath: str
