"""Pytest configuration for backend tests.

Points the app's config and store dependencies at a temporary audio directory.
"""

import pytest
from fastapi.testclient import TestClient

from audio_shelf.core.config import Config, LibraryConfig
from audio_shelf.domain.library import LibraryStore
from web.backend.deps import get_config, get_store
from web.backend.main import app


@pytest.fixture
def test_config(audio_dir) -> Config:
    return Config(library=LibraryConfig(audio_dir=str(audio_dir)))


@pytest.fixture
def client(test_config, audio_dir):
    """TestClient whose requests read and write audio_dir."""
    app.dependency_overrides[get_config] = lambda: test_config
    app.dependency_overrides[get_store] = lambda: LibraryStore(audio_dir)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
