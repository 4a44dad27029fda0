"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and BCC_* environment variables, and wires a fully
configured ``CacheManager`` and ``RouteDispatcher`` from them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from bccache.core.fetcher import UrllibFetcher
from bccache.core.generators import CommandGenerator
from bccache.core.manager import CacheManager
from bccache.models.config import ArtifactKind, CacheConfig
from bccache.models.routing import RouteBinding, RouteKind
from bccache.routing.dispatcher import RouteDispatcher


class BCCSettings(BaseSettings):
    """Settings with environment variable overrides.

    Any output folder left unset disables that artifact kind (and its route).
    Complex values (``sources``, ``*_command``) are given as JSON.

    Examples
    --------
    Override via environment::

        export BCC_SOURCE_DIR=ts
        export BCC_COMPILE_DIR=.bcc/compiled
        export BCC_CACHE_DIR=.bcc/remote
        export BCC_SOURCES='{"std": "https://deno.land/std/"}'
        export BCC_COMPILE_COMMAND='["esbuild", "{source}", "--format=esm"]'

    Or via .env file::

        BCC_BUNDLE_DIR=.bcc/bundled
        BCC_MAP_SOURCES=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BCC_",
        env_file_encoding="utf-8",
    )

    # Source tree and artifact folders
    source_dir: Path = Path("src")
    bundle_dir: Path | None = None
    compile_dir: Path | None = None
    transpile_dir: Path | None = None

    # Remote cache
    cache_dir: Path | None = None
    cache_root: str = "/cache"
    map_sources: bool = False
    sources: dict[str, str] = {}
    fetch_timeout_seconds: float = 30.0

    # Generator argument lists; "{source}" is replaced by the source path
    bundle_command: list[str] | None = None
    compile_command: list[str] | None = None
    transpile_command: list[str] | None = None
    generator_timeout_seconds: float = 120.0

    # Routing
    bundle_pattern: str | None = r"/bundled/(.+)"
    compile_pattern: str | None = r"/compiled/(.+)"
    transpile_pattern: str | None = r"/transpiled/(.+)"
    cache_pattern: str | None = r"/cache/(.+?)/(.+)"
    strict_status: bool = False

    # Logging
    log_level: str = "INFO"

    def to_cache_config(self) -> CacheConfig:
        return CacheConfig.from_folders(
            self.source_dir,
            bundle_dir=self.bundle_dir,
            compile_dir=self.compile_dir,
            transpile_dir=self.transpile_dir,
            cache_dir=self.cache_dir,
            cache_root=self.cache_root,
            map_sources=self.map_sources,
        )

    def command_for(self, kind: ArtifactKind) -> list[str] | None:
        return getattr(self, f"{kind.value}_command")

    def route_bindings(self) -> list[RouteBinding]:
        return [
            RouteBinding(kind=kind, pattern=getattr(self, f"{kind.value}_pattern"))
            for kind in RouteKind
        ]


def build_manager(settings: BCCSettings | None = None) -> CacheManager:
    """Create a ``CacheManager`` with command generators and sources registered."""
    settings = settings or BCCSettings()
    manager = CacheManager(
        settings.to_cache_config(),
        fetcher=UrllibFetcher(timeout=settings.fetch_timeout_seconds),
    )
    for kind in ArtifactKind:
        command = settings.command_for(kind)
        if command:
            manager.set_generator(
                kind,
                CommandGenerator(
                    settings.source_dir,
                    command,
                    timeout=settings.generator_timeout_seconds,
                    rewrite=manager.rewrite,
                ),
            )
    for handle, base_url in settings.sources.items():
        manager.add_cache_source(handle, base_url)
    return manager


def build_dispatcher(
    settings: BCCSettings | None = None, manager: CacheManager | None = None
) -> RouteDispatcher:
    """Create a ``RouteDispatcher`` from the routing settings.

    Builds the manager from the same settings when none is given.
    """
    settings = settings or BCCSettings()
    return RouteDispatcher(
        manager or build_manager(settings),
        settings.route_bindings(),
        strict_status=settings.strict_status,
    )
