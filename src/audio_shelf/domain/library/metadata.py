"""
Audio metadata extraction and ID3 tag mirroring.

Reads intrinsic metadata (duration, embedded title/artist/bpm) from MP3 and
WAV files using Mutagen, and mirrors sidecar fields into MP3 ID3 frames.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.id3 import (
    ID3,
    ID3NoHeaderError,
    TBPM,
    TIT2,
    TPE1,
    COMM,
)

from .exceptions import MetadataReadError
from .models import IntrinsicMetadata, MetadataRecord

TAG_SEPARATOR = ", "


def get_tag_value(audio_file: MutagenFile, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    tags = getattr(audio_file, "tags", None)
    if tags is None:
        return None
    for tag_name in tag_names:
        try:
            value = tags.get(tag_name)
        except (KeyError, ValueError):
            # Some formats raise ValueError for non-existent keys
            continue
        if not value:
            continue
        # ID3 frames carry a text list
        text = getattr(value, "text", value)
        if isinstance(text, list):
            if not text:
                continue
            return str(text[0])
        return str(text)
    return None


def extract_audio_metadata(local_path: str) -> IntrinsicMetadata:
    """Extract duration and embedded title/artist/bpm using mutagen.

    Raises:
        MetadataReadError: If the file cannot be parsed as audio
    """
    try:
        audio_file = MutagenFile(local_path)
    except (MutagenError, OSError) as e:
        raise MetadataReadError(f"{Path(local_path).name}: {e}") from e

    if audio_file is None:
        raise MetadataReadError(f"{Path(local_path).name}: unrecognized audio format")

    duration = None
    if getattr(audio_file, "info", None) is not None:
        duration = getattr(audio_file.info, "length", None)

    return IntrinsicMetadata(
        title=get_tag_value(audio_file, ["TIT2", "TITLE", "title"]),
        artist=get_tag_value(audio_file, ["TPE1", "ARTIST", "artist"]),
        bpm=get_tag_value(audio_file, ["TBPM", "BPM", "bpm"]),
        duration=duration,
    )


def format_tags_comment(tags: list[str]) -> str:
    """Join custom tags into the text stored in the comment frame."""
    return TAG_SEPARATOR.join(tags)


def _set_text_frame(id3: ID3, frame_id: str, ctor, value: str) -> None:
    if value:
        id3.setall(frame_id, [ctor(encoding=3, text=[value])])
    else:
        id3.delall(frame_id)


def write_id3_tags(local_path: str, record: MetadataRecord) -> bool:
    """Mirror a metadata record into the MP3's ID3 frames using atomic writes.

    Writes title, artist, bpm and a comment holding the tags. Files without an
    ID3 header get a fresh one.

    Returns:
        True if successful, False otherwise
    """
    if not os.path.exists(local_path):
        logger.warning(f"File not found: {local_path}")
        return False

    # Use atomic write: copy to temp, modify, replace
    temp_path = local_path + ".tmp"

    try:
        shutil.copy2(local_path, temp_path)

        try:
            id3 = ID3(temp_path)
        except ID3NoHeaderError:
            id3 = ID3()

        _set_text_frame(id3, "TIT2", TIT2, record.title)
        _set_text_frame(id3, "TPE1", TPE1, record.artist)
        _set_text_frame(id3, "TBPM", TBPM, record.bpm)
        id3.setall(
            "COMM",
            [
                COMM(
                    encoding=3,
                    lang="eng",
                    desc="",
                    text=[format_tags_comment(record.tags)],
                )
            ],
        )
        id3.save(temp_path)

        os.replace(temp_path, local_path)
        return True

    except (MutagenError, OSError) as e:
        logger.exception(f"Error writing ID3 tags to {local_path}: {e}")
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.warning(f"Could not remove temp file {temp_path}")
        return False
