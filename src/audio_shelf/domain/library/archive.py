"""
Streaming zip archive writer.

Builds a zip incrementally into an in-memory spool and yields the bytes as
they are produced, so large selections never sit in memory whole.
"""

import zipfile
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from .exceptions import ArchiveError

CHUNK_SIZE = 1024 * 1024


class _Spool:
    """Write-only, non-seekable sink that hands written bytes back on drain()."""

    def __init__(self):
        self._chunks: list[bytes] = []
        self._offset = 0

    def write(self, data: bytes) -> int:
        if data:
            self._chunks.append(bytes(data))
            self._offset += len(data)
        return len(data)

    def tell(self) -> int:
        return self._offset

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks = []
        return data


def stream_zip(entries: Iterable[tuple[str, Path]]) -> Iterator[bytes]:
    """Yield a zip archive containing each (arcname, path) entry.

    Raises:
        ArchiveError: If the archive cannot be built; the stream stops there
    """
    spool = _Spool()
    try:
        with zipfile.ZipFile(spool, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for arcname, path in entries:
                # Sizes are unknown up front on a non-seekable spool
                with open(path, "rb") as src, zf.open(
                    arcname, "w", force_zip64=True
                ) as dest:
                    while True:
                        chunk = src.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        dest.write(chunk)
                        data = spool.drain()
                        if data:
                            yield data
                data = spool.drain()
                if data:
                    yield data
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        logger.exception(f"Archive construction failed: {e}")
        raise ArchiveError(str(e)) from e

    # Central directory is written on close
    data = spool.drain()
    if data:
        yield data
