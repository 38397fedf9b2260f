"""
Path security validation utilities for Audio Shelf.

Provides pure functions to validate that client-supplied filenames stay inside
the library directory, preventing directory traversal and symlink escapes.
"""

from pathlib import Path
from typing import Optional


def is_path_within_library(file_path: Path, library_root: Path) -> bool:
    """Pure function - validates path is within the library directory.

    Uses Path.resolve() to handle symlinks and relative paths, then checks if the
    resolved path is a child of the library root.

    Args:
        file_path: The file path to validate
        library_root: The library root directory

    Returns:
        True if path is within library boundaries, False otherwise
    """
    try:
        resolved_path = file_path.resolve()
        resolved_root = library_root.resolve()
        if resolved_path == resolved_root:
            return False
        resolved_path.relative_to(resolved_root)
        return True
    except ValueError:
        # relative_to raises ValueError if path is not a subpath
        return False
    except (OSError, RuntimeError):
        # Path.resolve() can raise OSError for invalid paths or RuntimeError for recursion
        return False


def is_plain_filename(filename: Optional[str]) -> bool:
    """Pure function - True if filename is a bare name with no path parts."""
    if not filename or filename in (".", ".."):
        return False
    if "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    return Path(filename).name == filename


def resolve_library_path(filename: Optional[str], library_root: Path) -> Optional[Path]:
    """Pure function - returns the path for filename inside library_root or None.

    Existence is not checked; callers decide whether a missing file is an error.
    """
    if not is_plain_filename(filename):
        return None

    candidate = library_root / filename
    if not is_path_within_library(candidate, library_root):
        return None

    return candidate
