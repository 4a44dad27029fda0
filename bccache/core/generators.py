"""Generators — turn a source script into one artifact file.

The caches only decide *when* to generate.  A generator is handed the
normalized script id and the planned artifact path; it resolves the source
file, transforms it, applies the rewrite pass and writes the artifact.

Priority of implementations:
1. **Custom backends** — any object satisfying the ``Generator`` protocol.
2. **CommandGenerator** — runs an external tool (``esbuild``, ``tsc``,
   ``swc``...) and captures its stdout.
3. **FunctionGenerator** — wraps a Python callable ``str -> str``.

A source that does not exist is not an error: nothing is written and the
cache reports the script as not found.  A transformation that fails raises
``GenerationError``, which the caches never catch.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from bccache.core.errors import GenerationError
from bccache.core.storage import Filesystem, LocalFilesystem

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_EXTENSIONS: tuple[str, ...] = ("", ".ts", ".tsx", ".js", ".jsx", ".mjs")


@runtime_checkable
class Generator(Protocol):
    """Protocol for artifact generators."""

    async def generate(self, script_id: str, target: Path) -> None:
        """Write the artifact for *script_id* to *target*.

        Parameters
        ----------
        script_id:
            Script path relative to the source root, ``.js`` suffix removed.
        target:
            Planned artifact path.  Parent directories may not exist yet.
        """
        ...


class FileGenerator:
    """Shared plumbing for generators that read one source file.

    Subclasses implement ``transform(source) -> str``.

    Parameters
    ----------
    source_dir:
        Root of the source tree.
    rewrite:
        Rewrite pass applied to the transformed code before it is persisted,
        usually ``CacheManager.rewrite``.
    filesystem:
        Where the artifact is written.  Defaults to ``LocalFilesystem``.
    extensions:
        Suffixes tried, in order, when resolving a script id to a file.
    """

    def __init__(
        self,
        source_dir: Path | str,
        *,
        rewrite: Callable[[str], str] | None = None,
        filesystem: Filesystem | None = None,
        extensions: Sequence[str] = DEFAULT_SOURCE_EXTENSIONS,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.rewrite = rewrite
        self.filesystem = filesystem or LocalFilesystem()
        self.extensions = tuple(extensions)

    def resolve_source(self, script_id: str) -> Path | None:
        """Find the source file for *script_id*, or ``None``."""
        for ext in self.extensions:
            candidate = self.source_dir / f"{script_id}{ext}"
            if candidate.is_file():
                return candidate
        return None

    async def transform(self, source: Path) -> str:
        raise NotImplementedError

    async def generate(self, script_id: str, target: Path) -> None:
        source = await asyncio.to_thread(self.resolve_source, script_id)
        if source is None:
            logger.warning(
                "%s: no source for %r under %s",
                type(self).__name__,
                script_id,
                self.source_dir,
            )
            return

        code = await self.transform(source)
        if self.rewrite is not None:
            code = self.rewrite(code)
        await self.filesystem.write_text(target, code)
        logger.info("%s: generated %s -> %s", type(self).__name__, source, target)


class CommandGenerator(FileGenerator):
    """Run an external tool and persist its stdout as the artifact.

    ``command`` is an argument list; ``{source}`` in any argument is replaced
    with the resolved source path.

    Examples
    --------
    >>> gen = CommandGenerator(
    ...     "src", ["esbuild", "{source}", "--bundle", "--format=esm"]
    ... )
    """

    def __init__(
        self,
        source_dir: Path | str,
        command: Sequence[str],
        *,
        timeout: float | None = 120.0,
        cwd: Path | str | None = None,
        **kwargs,
    ) -> None:
        super().__init__(source_dir, **kwargs)
        if not command:
            raise ValueError("CommandGenerator requires a non-empty command")
        self.command = list(command)
        self.timeout = timeout
        self.cwd = Path(cwd) if cwd is not None else None

    def build_argv(self, source: Path) -> list[str]:
        return [arg.replace("{source}", str(source)) for arg in self.command]

    def _run(self, argv: list[str]) -> str:
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise GenerationError(f"Could not run {argv[0]!r}: {exc}") from exc
        if result.returncode != 0:
            raise GenerationError(
                f"{argv[0]} exited with status {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout

    async def transform(self, source: Path) -> str:
        return await asyncio.to_thread(self._run, self.build_argv(source))


class FunctionGenerator(FileGenerator):
    """Transform the source text with a plain Python callable.

    Any exception raised by *func* is re-raised as ``GenerationError``.
    """

    def __init__(
        self,
        source_dir: Path | str,
        func: Callable[[str], str],
        **kwargs,
    ) -> None:
        super().__init__(source_dir, **kwargs)
        self.func = func

    async def transform(self, source: Path) -> str:
        text = await self.filesystem.read_text(source)
        try:
            return self.func(text)
        except Exception as exc:
            raise GenerationError(f"Transforming {source} failed: {exc}") from exc
