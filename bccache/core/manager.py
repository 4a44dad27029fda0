"""CacheManager — the Bundle-Compile-Cache facade.

Aggregates path planning, the three artifact caches, the remote cache and
the rewrite pass behind one object.  The manager exclusively owns its
configuration and its registry of remote sources.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from bccache.core.artifact_cache import ArtifactCache
from bccache.core.fetcher import Fetcher, UrllibFetcher
from bccache.core.generators import Generator
from bccache.core.paths import ScriptPaths, is_valid_script, plan
from bccache.core.remote_cache import RemoteCache
from bccache.core.rewriter import rewrite as rewrite_sources
from bccache.core.storage import Filesystem, LocalFilesystem
from bccache.models.config import ArtifactKind, CacheConfig
from bccache.models.results import CacheResult

logger = logging.getLogger(__name__)


class CacheManager:
    """Bundle-Compile-Cache provider.

    Parameters
    ----------
    config:
        Immutable cache configuration.
    generators:
        Generator per artifact kind.  Kinds without one never fill on a miss.
    filesystem:
        Storage backend.  Defaults to ``LocalFilesystem``.
    fetcher:
        Network backend for the remote cache.  Defaults to ``UrllibFetcher``.

    Examples
    --------
    >>> cfg = CacheConfig.from_folders("src", compile_dir="compiled")
    >>> manager = CacheManager(cfg)
    >>> manager.add_cache_source("lib", "https://cdn.example/lib/")
    >>> manager.valid_source("lib")
    True
    """

    def __init__(
        self,
        config: CacheConfig,
        generators: Mapping[ArtifactKind, Generator] | None = None,
        *,
        filesystem: Filesystem | None = None,
        fetcher: Fetcher | None = None,
    ) -> None:
        self.config = config
        self._fs = filesystem or LocalFilesystem()
        self._sources: dict[str, str] = {}
        generators = dict(generators or {})
        self._caches: dict[ArtifactKind, ArtifactCache] = {
            kind: ArtifactCache(kind, config, self._fs, generators.get(kind))
            for kind in ArtifactKind
        }
        self._remote = RemoteCache(
            config,
            self._sources,
            self._fs,
            fetcher or UrllibFetcher(),
            rewrite=self.rewrite,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_generator(self, kind: ArtifactKind, generator: Generator | None) -> None:
        """Install (or remove) the generator used for *kind*."""
        self._caches[kind].generator = generator

    def generator_for(self, kind: ArtifactKind) -> Generator | None:
        return self._caches[kind].generator

    def is_enabled(self, kind: ArtifactKind) -> bool:
        return self.config.is_enabled(kind)

    @property
    def remote_enabled(self) -> bool:
        return self.config.remote_enabled

    def paths(self, script: str) -> ScriptPaths:
        return plan(script, self.config)

    # ------------------------------------------------------------------
    # Remote sources
    # ------------------------------------------------------------------

    def add_cache_source(self, handle: str, base_url: str) -> None:
        """Register a remote source.  Re-registering a handle replaces its URL.

        Raises
        ------
        ValueError
            If *handle* is empty or contains a path separator.
        """
        if not handle or "/" in handle or "\\" in handle or handle in (".", ".."):
            raise ValueError(f"Invalid source handle: {handle!r}")
        self._sources[handle] = base_url
        logger.info("Registered remote source %s -> %s", handle, base_url)

    def valid_source(self, handle: str) -> bool:
        return handle in self._sources

    @property
    def sources(self) -> Mapping[str, str]:
        """Read-only view of the registered sources."""
        return MappingProxyType(self._sources)

    def rewrite(self, code: str) -> str:
        """Point registered remote URLs in *code* at the local cache mirror."""
        return rewrite_sources(
            code, self.config.map_sources, self._sources, self.config.cache_root
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def valid(self, script: str | None) -> bool:
        """Whether *script* names an existing file in the source folder."""
        if not is_valid_script(script):
            return False
        return await self._fs.exists(self.paths(script).source)

    async def cached(self, kind: ArtifactKind, script: str | None) -> CacheResult:
        return await self._caches[kind].get(script)

    async def cached_bundle(self, script: str | None) -> CacheResult:
        return await self.cached(ArtifactKind.BUNDLE, script)

    async def cached_compile(self, script: str | None) -> CacheResult:
        return await self.cached(ArtifactKind.COMPILE, script)

    async def cached_transpile(self, script: str | None) -> CacheResult:
        return await self.cached(ArtifactKind.TRANSPILE, script)

    async def script_cache(self, script: str | None, handle: str) -> CacheResult:
        """Return a remote script from the local cache, fetching it on a miss."""
        return await self._remote.fetch(script, handle)

    # ------------------------------------------------------------------
    # Forced generation
    # ------------------------------------------------------------------

    async def bundle(self, script: str) -> None:
        await self._caches[ArtifactKind.BUNDLE].generate(script)

    async def compile(self, script: str) -> None:
        await self._caches[ArtifactKind.COMPILE].generate(script)

    async def transpile(self, script: str) -> None:
        await self._caches[ArtifactKind.TRANSPILE].generate(script)

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    async def clear_bundle_cache(self) -> None:
        await self._caches[ArtifactKind.BUNDLE].clear()

    async def clear_compile_cache(self) -> None:
        await self._caches[ArtifactKind.COMPILE].clear()

    async def clear_transpile_cache(self) -> None:
        await self._caches[ArtifactKind.TRANSPILE].clear()

    async def clear_external_cache(self) -> None:
        await self._remote.clear()

    async def clear_all_cache(self) -> None:
        """Clear every configured cache directory concurrently."""
        await asyncio.gather(
            self.clear_bundle_cache(),
            self.clear_compile_cache(),
            self.clear_transpile_cache(),
            self.clear_external_cache(),
        )

    def directory_for(self, kind: ArtifactKind) -> Path | None:
        return self._caches[kind].directory

    @property
    def remote_directory(self) -> Path | None:
        return self._remote.directory
