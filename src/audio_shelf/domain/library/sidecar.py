"""
Sidecar JSON persistence for metadata records.

Every audio file ``<stem>.<ext>`` is paired with ``<stem>.json`` in the same
directory.
"""

import json
import os
from pathlib import Path
from typing import Optional

from loguru import logger

from .models import MetadataRecord

SIDECAR_SUFFIX = ".json"


def get_sidecar_path(audio_path: Path) -> Path:
    """Pure function - sidecar path for an audio file (extension stripped)."""
    return audio_path.with_suffix(SIDECAR_SUFFIX)


def load_record(audio_path: Path) -> Optional[MetadataRecord]:
    """Load the sidecar record for audio_path.

    Returns None if the sidecar is missing or unreadable.
    """
    sidecar_path = get_sidecar_path(audio_path)
    try:
        with open(sidecar_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Unreadable metadata file {sidecar_path.name}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed metadata file {sidecar_path.name}")
        return None

    return MetadataRecord.from_dict(data)


def save_record(audio_path: Path, record: MetadataRecord) -> Path:
    """Persist record next to audio_path, replacing any existing sidecar.

    Writes to a temp file first so readers never see a half-written sidecar.

    Raises:
        OSError: If the sidecar cannot be written
    """
    sidecar_path = get_sidecar_path(audio_path)
    temp_path = sidecar_path.with_name(f".{sidecar_path.name}.tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(record.to_dict(), f)
        os.replace(temp_path, sidecar_path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise
    return sidecar_path


def ensure_record(audio_path: Path) -> MetadataRecord:
    """Load the sidecar record, creating a default one if it is missing.

    Raises:
        OSError: If a default sidecar has to be created and cannot be written
    """
    record = load_record(audio_path)
    if record is not None:
        return record

    record = MetadataRecord.default()
    save_record(audio_path, record)
    logger.debug(f"Created default metadata for {audio_path.name}")
    return record


def delete_record(audio_path: Path) -> bool:
    """Remove the sidecar for audio_path.

    Returns:
        True if a sidecar was removed, False if there was none

    Raises:
        OSError: If the sidecar exists but cannot be removed
    """
    try:
        get_sidecar_path(audio_path).unlink()
        return True
    except FileNotFoundError:
        return False
