"""Tests for LocalFilesystem — atomic writes, clearing, missing files."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from bccache.core.storage import Filesystem, LocalFilesystem, empty_dir_sync, write_text_atomic


class TestWriteTextAtomic:
    def test_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c.js"
        write_text_atomic(target, "x = 1;")
        assert target.read_text(encoding="utf-8") == "x = 1;"

    def test_replaces_existing(self, tmp_path: Path):
        target = tmp_path / "c.js"
        target.write_text("old", encoding="utf-8")
        write_text_atomic(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_leaves_no_temp_files(self, tmp_path: Path):
        write_text_atomic(tmp_path / "c.js", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["c.js"]

    def test_preserves_newlines(self, tmp_path: Path):
        write_text_atomic(tmp_path / "c.js", "a\r\nb\n")
        assert (tmp_path / "c.js").read_bytes() == b"a\r\nb\n"


class TestEmptyDir:
    def test_removes_files_and_subdirs(self, tmp_path: Path):
        (tmp_path / "d" / "sub").mkdir(parents=True)
        (tmp_path / "d" / "f.js").write_text("x")
        (tmp_path / "d" / "sub" / "g.js").write_text("y")
        empty_dir_sync(tmp_path / "d")
        assert (tmp_path / "d").is_dir()
        assert list((tmp_path / "d").iterdir()) == []

    def test_creates_missing_dir(self, tmp_path: Path):
        empty_dir_sync(tmp_path / "new")
        assert (tmp_path / "new").is_dir()


class TestLocalFilesystem:
    def test_satisfies_protocol(self):
        assert isinstance(LocalFilesystem(), Filesystem)

    def test_round_trip(self, tmp_path: Path):
        fs = LocalFilesystem()

        async def scenario() -> str:
            await fs.write_text(tmp_path / "x" / "a.js", "content")
            return await fs.read_text(tmp_path / "x" / "a.js")

        assert asyncio.run(scenario()) == "content"

    def test_read_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(LocalFilesystem().read_text(tmp_path / "missing.js"))

    def test_exists(self, tmp_path: Path):
        fs = LocalFilesystem()
        (tmp_path / "a").write_text("x")
        assert asyncio.run(fs.exists(tmp_path / "a")) is True
        assert asyncio.run(fs.exists(tmp_path / "b")) is False

    def test_read_replaces_undecodable_bytes(self, tmp_path: Path):
        (tmp_path / "bad.js").write_bytes(b"a\xffb")
        assert asyncio.run(LocalFilesystem().read_text(tmp_path / "bad.js")) == "a\ufffdb"
