"""Tests for the FastAPI application wiring."""

from fastapi.testclient import TestClient

from audio_shelf import __version__
from audio_shelf.core.config import load_config
from web.backend.deps import get_store
from web.backend.main import app, get_allowed_origins


class BrokenStore:
    def list_files(self):
        raise RuntimeError("disk on fire")


class TestApp:
    """Test app-level endpoints and middleware."""

    def test_health_endpoint(self, client):
        """Test health check endpoint returns 200."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_openapi_metadata(self, client):
        """Test the schema advertises the service name and version."""
        info = client.get("/openapi.json").json()["info"]
        assert info["title"] == "Audio Shelf API"
        assert info["version"] == __version__

    def test_cors_preflight_on_audio(self, client):
        """Test the dev origin may call the audio routes."""
        response = client.options(
            "/audio",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "PUT",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestErrorHandlers:
    """Test errors are rendered as {error, details}."""

    def test_library_error(self, client):
        response = client.delete("/audio/ghost.wav")
        assert response.status_code == 404
        assert set(response.json()) == {"error", "details"}

    def test_unexpected_error(self):
        """Test an unhandled exception becomes a 500 JSON body."""
        app.dependency_overrides[get_store] = lambda: BrokenStore()
        try:
            with TestClient(app, raise_server_exceptions=False) as test_client:
                response = test_client.get("/audio")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "details": "disk on fire",
        }


class TestAllowedOrigins:
    """Test CORS origins come from configuration."""

    def test_toml_origins(self, monkeypatch, tmp_path):
        """Test origins set in config.toml are used."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            '[web]\nallowed_origins = ["https://shelf.test", " "]\n', encoding="utf-8"
        )
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
        monkeypatch.setattr(
            "audio_shelf.core.config.get_config_path", lambda: config_path
        )

        assert get_allowed_origins(load_config()) == ["https://shelf.test"]

    def test_env_wins(self, monkeypatch, tmp_path):
        """Test ALLOWED_ORIGINS overrides the file."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            '[web]\nallowed_origins = ["https://shelf.test"]\n', encoding="utf-8"
        )
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.test,https://b.test")
        monkeypatch.setattr(
            "audio_shelf.core.config.get_config_path", lambda: config_path
        )

        assert get_allowed_origins(load_config()) == ["https://a.test", "https://b.test"]
