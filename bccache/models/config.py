"""Cache configuration models — per-kind output settings, decided once."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(str, Enum):
    """The derived representations the cache can hold for a source script."""

    BUNDLE = "bundle"
    COMPILE = "compile"
    TRANSPILE = "transpile"

    @property
    def operation(self) -> str:
        """Operation name used in sentinel messages (``cachedBundle`` etc.)."""
        return f"cached{self.value.capitalize()}"


REMOTE_OPERATION = "scriptCache"


class OutputEnabled(BaseModel):
    """An output directory is configured; the feature is on."""

    model_config = ConfigDict(frozen=True)

    state: Literal["enabled"] = "enabled"
    directory: Path


class OutputDisabled(BaseModel):
    """No output directory is configured; the feature is off."""

    model_config = ConfigDict(frozen=True)

    state: Literal["disabled"] = "disabled"


OutputSetting = Annotated[
    Union[OutputEnabled, OutputDisabled], Field(discriminator="state")
]


def output_setting(directory: Path | str | None) -> OutputEnabled | OutputDisabled:
    """Turn an optional folder into an explicit enabled/disabled setting."""
    if directory is None or str(directory) == "":
        return OutputDisabled()
    return OutputEnabled(directory=Path(directory))


class CacheConfig(BaseModel):
    """Immutable configuration held by a ``CacheManager``.

    Every artifact kind and the remote cache carry an ``OutputSetting``.
    A kind is enabled iff its setting is ``OutputEnabled``; this is
    decided here, at construction, and never re-derived from raw paths.

    Examples
    --------
    >>> cfg = CacheConfig.from_folders("src", compile_dir="out/compiled")
    >>> cfg.is_enabled(ArtifactKind.COMPILE)
    True
    >>> cfg.is_enabled(ArtifactKind.BUNDLE)
    False
    """

    model_config = ConfigDict(frozen=True)

    source_dir: Path
    bundle: OutputSetting = OutputDisabled()
    compile: OutputSetting = OutputDisabled()
    transpile: OutputSetting = OutputDisabled()
    remote: OutputSetting = OutputDisabled()
    cache_root: str = "/cache"
    map_sources: bool = False

    @classmethod
    def from_folders(
        cls,
        source_dir: Path | str,
        *,
        bundle_dir: Path | str | None = None,
        compile_dir: Path | str | None = None,
        transpile_dir: Path | str | None = None,
        cache_dir: Path | str | None = None,
        cache_root: str | None = None,
        map_sources: bool = False,
    ) -> CacheConfig:
        """Build a config from optional folders (``None`` disables a kind)."""
        return cls(
            source_dir=Path(source_dir),
            bundle=output_setting(bundle_dir),
            compile=output_setting(compile_dir),
            transpile=output_setting(transpile_dir),
            remote=output_setting(cache_dir),
            cache_root=cache_root if cache_root is not None else "/cache",
            map_sources=map_sources,
        )

    def output_for(self, kind: ArtifactKind) -> OutputEnabled | OutputDisabled:
        return getattr(self, kind.value)

    def is_enabled(self, kind: ArtifactKind) -> bool:
        return isinstance(self.output_for(kind), OutputEnabled)

    @property
    def remote_enabled(self) -> bool:
        return isinstance(self.remote, OutputEnabled)
