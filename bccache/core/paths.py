"""Path planning — where a script's source and artifacts live on disk.

Pure functions only; nothing here touches the filesystem.  Layout::

    {source_dir}/{script}
    {bundle_dir}/{script}
    {compile_dir}/{script}
    {transpile_dir}/{script}
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict

from bccache.models.config import ArtifactKind, CacheConfig, OutputEnabled

SCRIPT_EXTENSION = ".js"


class ScriptPaths(BaseModel):
    """Every location relevant to one script.  ``None`` means disabled."""

    model_config = ConfigDict(frozen=True)

    source: Path
    source_uri: str
    bundle: Path | None = None
    compile: Path | None = None
    transpile: Path | None = None

    def for_kind(self, kind: ArtifactKind) -> Path | None:
        return getattr(self, kind.value)


def is_valid_script(script: str | None) -> bool:
    """Whether *script* may be used to address a file under a cache root.

    Rejects ``None``, empty strings, NUL bytes, absolute paths and any ``..``
    segment.
    """
    if not script or "\x00" in script:
        return False
    if script.startswith(("/", "\\")):
        return False
    parts = PurePosixPath(script.replace("\\", "/")).parts
    return ".." not in parts


def normalize_script(script: str) -> str:
    """Strip one trailing ``.js`` so generators see the bare script id."""
    return script.removesuffix(SCRIPT_EXTENSION)


def _planned(setting: object, script: str) -> Path | None:
    if isinstance(setting, OutputEnabled):
        return setting.directory / script
    return None


def plan(script: str, config: CacheConfig) -> ScriptPaths:
    """Compute the source and per-kind artifact paths for *script*."""
    return ScriptPaths(
        source=config.source_dir / script,
        source_uri=config.source_dir.resolve().as_uri() + "/",
        bundle=_planned(config.bundle, script),
        compile=_planned(config.compile, script),
        transpile=_planned(config.transpile, script),
    )


def remote_entry_path(
    config: CacheConfig, handle: str, digest: str
) -> Path | None:
    """``{cache_dir}/{handle}/{digest}``, or ``None`` when the remote cache is off."""
    if isinstance(config.remote, OutputEnabled):
        return config.remote.directory / handle / digest
    return None
