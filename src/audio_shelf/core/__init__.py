"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging setup (Loguru)
- Path containment checks

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    LibraryConfig,
    WebConfig,
    LoggingConfig,
    load_config,
    parse_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    create_default_config,
    ensure_directories,
)

# Path security
from .path_security import (
    is_path_within_library,
    is_plain_filename,
    resolve_library_path,
)

__all__ = [
    # Config
    "Config",
    "LibraryConfig",
    "WebConfig",
    "LoggingConfig",
    "load_config",
    "parse_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "create_default_config",
    "ensure_directories",
    # Path security
    "is_path_within_library",
    "is_plain_filename",
    "resolve_library_path",
]
