"""Tagged cache results.

Expected miss conditions are returned as data, never raised.  Each variant
knows how to render itself as a response body; failure variants render the
executable sentinel (``throw new Error("...")``) so that a script consumer
that ignores the status still fails loudly at use-time.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


def _js_string(text: str) -> str:
    """Escape *text* for use inside a double-quoted JS string literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def sentinel(message: str) -> str:
    """Wrap *message* in a statement that throws when executed."""
    return f'throw new Error("{_js_string(message)}")'


class CacheHit(BaseModel):
    """The artifact was served from (or freshly written to) storage."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    content: str

    @property
    def ok(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return ""

    @property
    def body(self) -> str:
        return self.content


class CacheDisabled(BaseModel):
    """The requested feature is not configured (or the source is unknown)."""

    model_config = ConfigDict(frozen=True)

    status: Literal["disabled"] = "disabled"
    operation: str
    reason: str = "is disabled in the BCC configuration"

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return f"{self.operation} {self.reason}."

    @property
    def body(self) -> str:
        return sentinel(self.message)


class CacheMiss(BaseModel):
    """Nothing could be read for the script, even after generating/fetching."""

    model_config = ConfigDict(frozen=True)

    status: Literal["not_found"] = "not_found"
    operation: str
    script: str
    source: str | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        if self.source is not None:
            return (
                f"{self.operation} missing file '{self.script}' "
                f"for source '{self.source}'."
            )
        return f"{self.operation} failed to find file '{self.script}'."

    @property
    def body(self) -> str:
        return sentinel(self.message)


CacheResult = Annotated[
    Union[CacheHit, CacheDisabled, CacheMiss], Field(discriminator="status")
]
