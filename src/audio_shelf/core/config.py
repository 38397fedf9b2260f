"""
Configuration management for Audio Shelf
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

# Extensions the library knows how to tag
AUDIO_FORMATS = (".mp3", ".wav")


@dataclass
class LibraryConfig:
    """Configuration for the audio library directory."""

    audio_dir: str = field(
        default_factory=lambda: str(get_data_dir() / "audio")
    )
    supported_formats: List[str] = field(default_factory=lambda: [".mp3", ".wav"])

    def validate(self) -> None:
        """Validate library configuration values.

        Raises:
            ValueError: If a format has no tag strategy
        """
        unknown = [fmt for fmt in self.supported_formats if fmt not in AUDIO_FORMATS]
        if unknown:
            raise ValueError(
                f"Unsupported formats: {', '.join(unknown)} "
                f"(allowed: {', '.join(AUDIO_FORMATS)})"
            )


@dataclass
class WebConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:5173"]
    )
    max_upload_mb: int = 250

    def validate(self) -> None:
        """Validate web configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if self.max_upload_mb <= 0:
            raise ValueError(f"Invalid max_upload_mb: {self.max_upload_mb}")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/audio-shelf/audio-shelf.log)
    )
    console_output: bool = True


@dataclass
class Config:
    """Main configuration object."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "audio-shelf"
    return Path.home() / ".config" / "audio-shelf"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "audio-shelf"
    return Path.home() / ".local" / "share" / "audio-shelf"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Used during development so the project's config file is picked up even
    when the server is started from another working directory.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    try:
        current = Path(__file__).resolve().parent
        for parent in [current] + list(current.parents):
            if (parent / "pyproject.toml").exists():
                config_path = parent / "config.toml"
                if config_path.exists():
                    return config_path
                return None
    except OSError:
        pass
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/audio-shelf (or ~/.config/audio-shelf)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Audio Shelf Configuration

[library]
# Directory holding the audio files and their .json sidecars
# audio_dir = "~/.local/share/audio-shelf/audio"

# Extensions treated as audio (any subset of .mp3 and .wav)
supported_formats = [".mp3", ".wav"]

[web]
host = "0.0.0.0"
port = 3000

# Origins allowed by CORS (ALLOWED_ORIGINS env var overrides, comma-separated)
allowed_origins = ["http://localhost:5173"]

# Maximum size of a single uploaded file in MB
max_upload_mb = 250

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/audio-shelf/audio-shelf.log)
# log_file = "/path/to/custom/audio-shelf.log"

# Also output logs to stderr
console_output = true
""".strip()


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides on top of TOML values."""
    audio_dir = os.environ.get("AUDIO_SHELF_AUDIO_DIR")
    if audio_dir:
        config.library.audio_dir = str(Path(audio_dir).expanduser())

    log_level = os.environ.get("AUDIO_SHELF_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    allowed_origins = os.environ.get("ALLOWED_ORIGINS", "")
    if allowed_origins:
        config.web.allowed_origins = [
            origin.strip() for origin in allowed_origins.split(",") if origin.strip()
        ]

    return config


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML data, falling back to defaults."""
    config = Config()

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            audio_dir=str(
                Path(
                    library_data.get("audio_dir", config.library.audio_dir)
                ).expanduser()
            ),
            supported_formats=[
                fmt.lower()
                for fmt in library_data.get(
                    "supported_formats", config.library.supported_formats
                )
            ],
        )
        config.library.validate()

    if "web" in toml_data:
        web_data = toml_data["web"]
        config.web = WebConfig(
            host=web_data.get("host", config.web.host),
            port=web_data.get("port", config.web.port),
            allowed_origins=web_data.get(
                "allowed_origins", config.web.allowed_origins
            ),
            max_upload_mb=web_data.get("max_upload_mb", config.web.max_upload_mb),
        )
        config.web.validate()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - AUDIO_SHELF_AUDIO_DIR
    - AUDIO_SHELF_LOG_LEVEL
    - ALLOWED_ORIGINS
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
        except OSError as e:
            print(f"Could not write default configuration to {config_path}: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = parse_config(toml_data)
    except (OSError, tomllib.TOMLDecodeError, ValueError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        config = Config()

    return _apply_env_overrides(config)


def ensure_directories(config: Config) -> None:
    """Ensure all necessary directories exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    Path(config.library.audio_dir).mkdir(parents=True, exist_ok=True)
