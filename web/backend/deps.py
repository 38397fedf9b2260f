from pathlib import Path

from fastapi import Depends

from audio_shelf.core.config import load_config, Config
from audio_shelf.domain.library import LibraryStore


def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


def get_store(config: Config = Depends(get_config)) -> LibraryStore:
    """FastAPI dependency for the library store rooted at the configured directory."""
    return LibraryStore(
        Path(config.library.audio_dir), config.library.supported_formats
    )
