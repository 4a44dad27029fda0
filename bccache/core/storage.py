"""Filesystem access for cache entries.

The existence of a file IS the cache state: there is no manifest or index.
``LocalFilesystem`` offloads blocking ``pathlib`` calls to a worker thread
and writes atomically (temp file in the target directory, then
``os.replace``), so a concurrent reader never sees a partial artifact.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Filesystem(Protocol):
    """Protocol for the file operations the caches depend on."""

    async def read_text(self, path: Path) -> str:
        """Return the file's text, undecodable bytes replaced.

        Raises ``FileNotFoundError`` if absent.
        """
        ...

    async def write_text(self, path: Path, text: str) -> None:
        ...

    async def ensure_dir(self, path: Path) -> None:
        ...

    async def empty_dir(self, path: Path) -> None:
        ...

    async def exists(self, path: Path) -> bool:
        ...


def write_text_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* via a sibling temp file and ``os.replace``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def empty_dir_sync(path: Path) -> None:
    """Delete everything inside *path*, creating it if it does not exist."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


class LocalFilesystem:
    """``Filesystem`` backed by the local disk."""

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8", errors="replace")

    async def write_text(self, path: Path, text: str) -> None:
        await asyncio.to_thread(write_text_atomic, Path(path), text)
        logger.debug("Wrote %d chars to %s", len(text), path)

    async def ensure_dir(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def empty_dir(self, path: Path) -> None:
        await asyncio.to_thread(empty_dir_sync, Path(path))
        logger.info("Emptied cache directory %s", path)

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).exists)
