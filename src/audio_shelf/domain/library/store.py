"""
Library store - owns the audio directory and its sidecar metadata records.

Every audio file is paired with exactly one ``<stem>.json`` record. The store
creates, updates and deletes the two together and lazily re-creates a record
whenever one is found missing on read.
"""

import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from loguru import logger

from audio_shelf.core.config import AUDIO_FORMATS
from audio_shelf.core.path_security import resolve_library_path

from . import sidecar
from .archive import stream_zip
from .exceptions import (
    BadRequestError,
    NotFoundError,
    StoreIOError,
    UnsupportedFormatError,
)
from .metadata import extract_audio_metadata, write_id3_tags
from .models import AudioFile, MetadataRecord, MetadataView, utc_now_iso

DEFAULT_FORMATS = AUDIO_FORMATS
ID3_FORMATS = (".mp3",)


class LibraryStore:
    """Audio files plus sidecar metadata in a single directory."""

    def __init__(self, root: Path, supported_formats: Sequence[str] = DEFAULT_FORMATS):
        self.root = Path(root)
        # Only formats with a tag strategy are ever treated as audio
        lowered = (fmt.lower() for fmt in supported_formats)
        self.supported_formats = tuple(fmt for fmt in lowered if fmt in AUDIO_FORMATS)

    # ---------------------- path resolution ----------------------
    def resolve(self, filename: Optional[str]) -> Path:
        """Map a client filename to a path inside the store root.

        Raises:
            BadRequestError: If the name is empty or escapes the root
        """
        path = resolve_library_path(filename, self.root)
        if path is None:
            raise BadRequestError(f"Invalid filename: {filename!r}")
        return path

    def _existing(self, filename: str) -> Path:
        path = self._audio_target(filename)
        if not path.is_file():
            raise NotFoundError(f"{filename} does not exist")
        return path

    def is_supported(self, path: Path) -> bool:
        return path.suffix.lower() in self.supported_formats

    def _audio_target(self, filename: Optional[str]) -> Path:
        """Resolve a name that is written, replaced or removed as audio.

        Raises:
            BadRequestError: If the name is invalid
            UnsupportedFormatError: If the name is not an mp3/wav file or would
                collide with a sidecar
        """
        path = self.resolve(filename)
        if not self.is_supported(path) or sidecar.get_sidecar_path(path) == path:
            raise UnsupportedFormatError(f"{filename} is not a supported audio file")
        return path

    def audio_path(self, filename: str) -> Path:
        """Resolve an existing audio file for streaming."""
        return self._existing(filename)

    def _describe(self, path: Path, record: Optional[MetadataRecord] = None) -> AudioFile:
        stat = path.stat()
        upload_date = record.upload_date if record else None
        if not upload_date:
            upload_date = (
                datetime.fromtimestamp(stat.st_mtime, timezone.utc)
                .isoformat(timespec="milliseconds")
                .replace("+00:00", "Z")
            )
        return AudioFile(
            filename=path.name,
            path=path,
            extension=path.suffix.lower(),
            size=stat.st_size,
            upload_date=upload_date,
        )

    # ---------------------- create ----------------------
    def create(self, filename: str, content: bytes) -> AudioFile:
        """Write an uploaded file and its default metadata record.

        Existing files with the same name are overwritten. A sidecar failure is
        retried once and then logged; the audio file stays.

        Raises:
            BadRequestError: If the filename is invalid
            UnsupportedFormatError: If the name is not an mp3/wav file
            StoreIOError: If the audio bytes cannot be written
        """
        path = self._audio_target(filename)
        try:
            path.write_bytes(content)
        except OSError as e:
            raise StoreIOError(
                f"Unable to write {filename}: {e}", side="audio"
            ) from e

        record = MetadataRecord.default()
        for attempt in (1, 2):
            try:
                sidecar.save_record(path, record)
                break
            except OSError as e:
                if attempt == 2:
                    logger.error(f"Error creating metadata file for {filename}: {e}")
                else:
                    logger.warning(f"Retrying metadata file for {filename}: {e}")

        logger.info(f"Stored {filename} ({len(content)} bytes)")
        return AudioFile(
            filename=path.name,
            path=path,
            extension=path.suffix.lower(),
            size=len(content),
            upload_date=record.upload_date,
        )

    def create_batch(self, files: Iterable[tuple[str, bytes]]) -> list[AudioFile]:
        """Create each (filename, content) pair independently."""
        return [self.create(filename, content) for filename, content in files]

    # ---------------------- read ----------------------
    def list_files(self) -> list[tuple[AudioFile, list[str]]]:
        """List supported audio files with their custom tags.

        Missing records are created on the fly; a record that cannot be loaded
        or created yields an empty tag list instead of failing the listing.

        Raises:
            StoreIOError: If the directory cannot be read
        """
        try:
            entries = list(os.scandir(self.root))
        except OSError as e:
            raise StoreIOError(f"Unable to list files: {e}", error="Unable to list files") from e

        results = []
        for entry in entries:
            if not entry.is_file():
                continue
            path = Path(entry.path)
            if not self.is_supported(path):
                continue
            try:
                record = sidecar.ensure_record(path)
            except OSError as e:
                logger.error(f"Error creating metadata file for {entry.name}: {e}")
                record = None
            try:
                audio = self._describe(path, record)
            except FileNotFoundError:
                # Removed between scandir and stat
                continue
            results.append((audio, list(record.tags) if record else []))
        return results

    def read_record(self, filename: str) -> MetadataRecord:
        """Load the sidecar record for filename, creating a default if missing."""
        path = self._existing(filename)
        try:
            return sidecar.ensure_record(path)
        except OSError as e:
            raise StoreIOError(
                f"Unable to create metadata for {filename}: {e}", side="metadata"
            ) from e

    def read_metadata(self, filename: str) -> MetadataView:
        """Merged sidecar + intrinsic metadata for filename.

        Raises:
            NotFoundError: If the audio file does not exist
            MetadataReadError: If the audio cannot be parsed
        """
        path = self._existing(filename)
        record = self.read_record(filename)
        intrinsic = extract_audio_metadata(str(path))
        return MetadataView.combine(record, intrinsic)

    # ---------------------- update ----------------------
    def write_metadata(self, filename: str, fields: dict) -> MetadataRecord:
        """Merge fields into the record and mirror them into MP3 ID3 frames.

        The ID3 write is best effort; the sidecar stays authoritative.

        Raises:
            UnsupportedFormatError: If the file is not mp3 or wav
            NotFoundError: If the audio file does not exist
            StoreIOError: If the sidecar cannot be written
        """
        path = self.resolve(filename)
        if not self.is_supported(path):
            raise UnsupportedFormatError(
                f"Cannot write metadata to {filename}: "
                f"{path.suffix or 'no extension'} is not supported"
            )
        if not path.is_file():
            raise NotFoundError(f"{filename} does not exist")

        current = sidecar.load_record(path) or MetadataRecord.default()
        updated = current.merge(fields, now=utc_now_iso())
        try:
            sidecar.save_record(path, updated)
        except OSError as e:
            raise StoreIOError(
                f"Unable to edit metadata for {filename}: {e}",
                side="metadata",
                error="Unable to edit metadata",
            ) from e

        if path.suffix.lower() in ID3_FORMATS:
            if not write_id3_tags(str(path), updated):
                logger.warning(f"ID3 mirror failed for {filename}; sidecar kept")

        logger.info(f"Updated metadata for {filename}")
        return updated

    def write_metadata_batch(
        self, filenames: Sequence[str], fields: dict
    ) -> list[MetadataRecord]:
        """Apply write_metadata to every file, stopping at the first failure.

        Files processed before the failure keep their new metadata.
        """
        if not filenames:
            raise BadRequestError("No filenames given")
        updated = []
        for filename in filenames:
            updated.append(self.write_metadata(filename, fields))
        return updated

    def replace(self, target_filename: Optional[str], content: Optional[bytes]) -> Path:
        """Swap the bytes of an existing file, keeping its metadata record.

        The new content is written under a hidden temp name and renamed over
        the target.

        Raises:
            BadRequestError: If target or content is missing
            UnsupportedFormatError: If the target is not an mp3/wav file
            NotFoundError: If the target does not exist
            StoreIOError: If the temp write or the rename fails
        """
        if not target_filename or content is None:
            raise BadRequestError(
                "Original file path and edited file are required"
            )
        target = self._existing(target_filename)
        temp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.upload")

        try:
            temp_path.write_bytes(content)
        except OSError as e:
            raise StoreIOError(
                f"Unable to write replacement for {target_filename}: {e}",
                side="audio",
                error="Error replacing file",
            ) from e

        try:
            os.replace(temp_path, target)
        except OSError as e:
            try:
                temp_path.unlink()
            except OSError:
                logger.warning(f"Could not remove temp upload {temp_path.name}")
            raise StoreIOError(
                f"Unable to replace {target_filename}: {e}",
                side="audio",
                error="Error replacing file",
            ) from e

        logger.info(f"Replaced {target_filename} ({len(content)} bytes)")
        return target

    # ---------------------- delete ----------------------
    def delete(self, filename: str) -> None:
        """Remove the audio file, then its metadata record.

        A record that is already gone counts as deleted.

        Raises:
            UnsupportedFormatError: If the name is not an mp3/wav file
            NotFoundError: If the audio file does not exist
            StoreIOError: With side "audio" or "metadata" for the removal that failed
        """
        path = self._existing(filename)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFoundError(f"{filename} does not exist") from e
        except OSError as e:
            raise StoreIOError(
                f"Unable to delete audio file {filename}: {e}",
                side="audio",
                error="Unable to delete audio file",
            ) from e

        try:
            sidecar.delete_record(path)
        except OSError as e:
            raise StoreIOError(
                f"Unable to delete metadata file for {filename}: {e}",
                side="metadata",
                error="Unable to delete metadata file",
            ) from e

        logger.info(f"Deleted {filename}")

    def delete_batch(self, filenames: Sequence[str]) -> None:
        """Delete each file in order, stopping at the first failure.

        Deletions made before the failure are not rolled back.
        """
        if not filenames:
            raise BadRequestError("No filenames given")
        for filename in filenames:
            self.delete(filename)

    # ---------------------- archive ----------------------
    def _archive_entries(self, filenames: Sequence[str]) -> Iterator[tuple[str, Path]]:
        seen = set()
        for filename in filenames:
            path = self.resolve(filename)
            if not self.is_supported(path):
                logger.info(f"Skipping non-audio file in archive: {filename}")
                continue
            if not path.is_file():
                logger.info(f"Skipping missing file in archive: {filename}")
                continue
            if path.name in seen:
                continue
            seen.add(path.name)
            yield path.name, path

    def download_archive(self, filenames: Sequence[str]) -> Iterator[bytes]:
        """Zip stream of the named audio files; sidecars are not included.

        Filenames are validated up front. Missing files are skipped.

        Raises:
            BadRequestError: If no filenames are given or a name is invalid
            ArchiveError: While streaming, if the archive cannot be built
        """
        if not filenames:
            raise BadRequestError("No filenames given")
        for filename in filenames:
            self.resolve(filename)
        return stream_zip(self._archive_entries(filenames))
