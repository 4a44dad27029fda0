"""Shared test fixtures for bccache."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from bccache.core.errors import FetchError, GenerationError
from bccache.core.manager import CacheManager
from bccache.core.storage import LocalFilesystem
from bccache.models.config import ArtifactKind, CacheConfig


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


class RecordingGenerator:
    """Generator that records calls and writes ``// <kind>:<script_id>``.

    Scripts listed in ``fail_on`` raise ``GenerationError``; scripts listed in
    ``skip`` write nothing.
    """

    def __init__(
        self,
        label: str = "gen",
        *,
        rewrite: Callable[[str], str] | None = None,
        fail_on: tuple[str, ...] = (),
        skip: tuple[str, ...] = (),
    ) -> None:
        self.label = label
        self.rewrite = rewrite
        self.fail_on = fail_on
        self.skip = skip
        self.calls: list[tuple[str, Path]] = []
        self.body: str = "import x from 'https://cdn.example/lib/x.js';"

    async def generate(self, script_id: str, target: Path) -> None:
        self.calls.append((script_id, target))
        if script_id in self.fail_on:
            raise GenerationError(f"malformed source: {script_id}")
        if script_id in self.skip:
            return
        code = f"// {self.label}:{script_id}\n{self.body}"
        if self.rewrite is not None:
            code = self.rewrite(code)
        await LocalFilesystem().write_text(target, code)


class FakeFetcher:
    """Fetcher serving a fixed URL -> text map and counting requests."""

    def __init__(self, responses: dict[str, str] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    async def fetch_text(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.responses:
            raise FetchError(f"GET {url} returned HTTP 404")
        return self.responses[url]


class CountingFilesystem(LocalFilesystem):
    """LocalFilesystem that counts every operation."""

    def __init__(self) -> None:
        self.ops: list[tuple[str, Path]] = []

    async def read_text(self, path: Path) -> str:
        self.ops.append(("read", path))
        return await super().read_text(path)

    async def write_text(self, path: Path, text: str) -> None:
        self.ops.append(("write", path))
        await super().write_text(path, text)

    async def ensure_dir(self, path: Path) -> None:
        self.ops.append(("ensure_dir", path))
        await super().ensure_dir(path)

    async def empty_dir(self, path: Path) -> None:
        self.ops.append(("empty_dir", path))
        await super().empty_dir(path)

    async def exists(self, path: Path) -> bool:
        self.ops.append(("exists", path))
        return await super().exists(path)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A source tree with ``app.ts`` and ``lib/util.ts``."""
    src = tmp_path / "src"
    (src / "lib").mkdir(parents=True)
    (src / "app.ts").write_text("export const app = 1;\n", encoding="utf-8")
    (src / "lib" / "util.ts").write_text("export const util = 2;\n", encoding="utf-8")
    return src


@pytest.fixture
def make_config(tmp_path: Path, source_dir: Path) -> Callable[..., CacheConfig]:
    """Factory fixture: every folder enabled under tmp_path unless overridden."""

    def _factory(**overrides: Any) -> CacheConfig:
        folders: dict[str, Any] = {
            "bundle_dir": tmp_path / "bundled",
            "compile_dir": tmp_path / "compiled",
            "transpile_dir": tmp_path / "transpiled",
            "cache_dir": tmp_path / "remote",
        }
        folders.update(overrides)
        return CacheConfig.from_folders(source_dir, **folders)

    return _factory


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher(
        {
            "https://cdn.example/lib/utils.js": "export const u = 'https://cdn.example/lib/dep.js';",
            "https://cdn.example/lib/other.js": "export const o = 2;",
        }
    )


@pytest.fixture
def generators() -> dict[ArtifactKind, RecordingGenerator]:
    return {kind: RecordingGenerator(kind.value) for kind in ArtifactKind}


@pytest.fixture
def manager(
    make_config: Callable[..., CacheConfig],
    generators: dict[ArtifactKind, RecordingGenerator],
    fetcher: FakeFetcher,
) -> CacheManager:
    """A manager with every cache enabled and ``lib`` registered."""
    mgr = CacheManager(make_config(), generators, fetcher=fetcher)
    mgr.add_cache_source("lib", "https://cdn.example/lib/")
    return mgr


@pytest.fixture
def make_generator() -> Callable[..., RecordingGenerator]:
    """Factory fixture: build a RecordingGenerator."""
    return RecordingGenerator


@pytest.fixture
def counting_fs() -> CountingFilesystem:
    return CountingFilesystem()
