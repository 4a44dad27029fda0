"""Read-through artifact cache with single-shot generate-on-miss.

Storage layout: {output_dir}/{script}
No invalidation: an entry lives until its directory is cleared.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bccache.core.generators import Generator
from bccache.core.inflight import InFlight
from bccache.core.paths import is_valid_script, normalize_script, plan
from bccache.core.storage import Filesystem
from bccache.models.config import ArtifactKind, CacheConfig, OutputEnabled
from bccache.models.results import CacheDisabled, CacheHit, CacheMiss, CacheResult

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Cache for one artifact kind (bundle, compile or transpile).

    Each ``get`` runs these stages in order:

    1. disabled kind -> ``CacheDisabled`` (no filesystem access)
    2. unusable script name -> ``CacheMiss`` (no filesystem access)
    3. read planned path -> ``CacheHit`` on success
    4. generate once (concurrent misses share one generation)
    5. re-read -> ``CacheHit`` on success
    6. otherwise ``CacheMiss``

    Generator faults are not caught.

    Parameters
    ----------
    kind:
        The artifact kind this cache serves.
    config:
        Shared cache configuration.
    filesystem:
        Storage backend.
    generator:
        Produces the artifact on a miss.  ``None`` means misses stay misses.
    """

    def __init__(
        self,
        kind: ArtifactKind,
        config: CacheConfig,
        filesystem: Filesystem,
        generator: Generator | None = None,
    ) -> None:
        self.kind = kind
        self._config = config
        self._fs = filesystem
        self.generator = generator
        self._inflight: InFlight[None] = InFlight()

    @property
    def operation(self) -> str:
        return self.kind.operation

    @property
    def enabled(self) -> bool:
        return self._config.is_enabled(self.kind)

    @property
    def directory(self) -> Path | None:
        setting = self._config.output_for(self.kind)
        return setting.directory if isinstance(setting, OutputEnabled) else None

    def path_for(self, script: str) -> Path | None:
        return plan(script, self._config).for_kind(self.kind)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def _read(self, path: Path) -> str | None:
        try:
            return await self._fs.read_text(path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None

    async def get(self, script: str | None) -> CacheResult:
        """Return the cached artifact for *script*, generating it on a miss."""
        if not self.enabled:
            return CacheDisabled(operation=self.operation)
        if not is_valid_script(script):
            return CacheMiss(operation=self.operation, script=script or "")

        path = self.path_for(script)
        data = await self._read(path)
        if data is not None:
            logger.debug("%s hit: %s", self.operation, path)
            return CacheHit(content=data)

        await self._fill(script, path)

        data = await self._read(path)
        if data is not None:
            return CacheHit(content=data)
        logger.info("%s: nothing generated for %r", self.operation, script)
        return CacheMiss(operation=self.operation, script=script)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def _fill(self, script: str, path: Path) -> None:
        if self.generator is None:
            logger.warning("%s: no generator configured", self.operation)
            return
        generator = self.generator
        script_id = normalize_script(script)
        logger.info("%s miss: generating %r", self.operation, script_id)
        await self._inflight.run(
            str(path), lambda: generator.generate(script_id, path)
        )

    async def generate(self, script: str) -> None:
        """Generate the artifact for *script* without consulting the cache.

        Does nothing when the kind is disabled or the script name is unusable.
        """
        if not self.enabled or not is_valid_script(script):
            return
        await self._fill(script, self.path_for(script))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Empty this kind's output directory (no-op when disabled)."""
        directory = self.directory
        if directory is None:
            return
        await self._fs.empty_dir(directory)
