"""Content-addressed cache of scripts fetched from registered remote sources.

Storage layout: {cache_dir}/{handle}/{md5(script)}

Entries are keyed by the fingerprint of the *requested path*, not of the
fetched content, so upstream changes are never detected.  Network and
write faults degrade to a ``CacheMiss`` instead of propagating.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from bccache.core.errors import FetchError
from bccache.core.fetcher import Fetcher
from bccache.core.hasher import fingerprint
from bccache.core.inflight import InFlight
from bccache.core.paths import is_valid_script, remote_entry_path
from bccache.core.storage import Filesystem
from bccache.models.config import REMOTE_OPERATION, CacheConfig, OutputEnabled
from bccache.models.results import CacheDisabled, CacheHit, CacheMiss, CacheResult

logger = logging.getLogger(__name__)


class RemoteCache:
    """Fetch-once cache for remote scripts.

    Parameters
    ----------
    config:
        Shared cache configuration; ``config.remote`` selects the directory.
    registry:
        Live mapping of source handle -> base URL (owned by the manager).
    filesystem:
        Storage backend.
    fetcher:
        Network backend.
    rewrite:
        Rewrite pass applied to fetched text before it is stored.
    """

    def __init__(
        self,
        config: CacheConfig,
        registry: Mapping[str, str],
        filesystem: Filesystem,
        fetcher: Fetcher,
        rewrite: Callable[[str], str] | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._fs = filesystem
        self._fetcher = fetcher
        self._rewrite = rewrite
        self._inflight: InFlight[None] = InFlight()

    @property
    def enabled(self) -> bool:
        return self._config.remote_enabled

    @property
    def directory(self) -> Path | None:
        remote = self._config.remote
        return remote.directory if isinstance(remote, OutputEnabled) else None

    def entry_path(self, script: str, handle: str) -> Path | None:
        """Where the entry for ``(handle, script)`` lives on disk."""
        return remote_entry_path(self._config, handle, fingerprint(script))

    async def _read(self, path: Path) -> str | None:
        try:
            return await self._fs.read_text(path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    async def fetch(self, script: str | None, handle: str) -> CacheResult:
        """Return the cached remote script, fetching it on a miss."""
        if not self.enabled:
            return CacheDisabled(operation=REMOTE_OPERATION)
        if handle not in self._registry:
            return CacheDisabled(
                operation=REMOTE_OPERATION,
                reason=f"source '{handle}' is not registered",
            )
        if not is_valid_script(script):
            return CacheMiss(operation=REMOTE_OPERATION, script=script or "", source=handle)

        path = self.entry_path(script, handle)
        data = await self._read(path)
        if data is not None:
            logger.debug("%s hit: %s/%s", REMOTE_OPERATION, handle, script)
            return CacheHit(content=data)

        await self._inflight.run(str(path), lambda: self._update(script, handle, path))

        data = await self._read(path)
        if data is not None:
            return CacheHit(content=data)
        return CacheMiss(operation=REMOTE_OPERATION, script=script, source=handle)

    async def _update(self, script: str, handle: str, path: Path) -> None:
        url = f"{self._registry[handle]}{script}"
        try:
            code = await self._fetcher.fetch_text(url)
        except FetchError as exc:
            logger.warning("Remote fetch failed for %s: %s", url, exc)
            return
        except Exception as exc:
            logger.warning("Fetcher raised %s for %s: %s", type(exc).__name__, url, exc)
            return

        if self._rewrite is not None:
            code = self._rewrite(code)
        try:
            await self._fs.ensure_dir(path.parent)
            await self._fs.write_text(path, code)
        except OSError as exc:
            logger.warning("Could not store %s at %s: %s", url, path, exc)
            return
        logger.info("Cached %s as %s", url, path)

    async def clear(self) -> None:
        """Empty the remote cache directory (no-op when disabled)."""
        directory = self.directory
        if directory is None:
            return
        await self._fs.empty_dir(directory)
