"""Exceptions raised by the cache engine.

Only unexpected faults are raised.  Expected misses (feature disabled,
unknown source, file not found) are returned as ``CacheResult`` values.
"""

from __future__ import annotations


class BCCError(RuntimeError):
    """Base class for bccache faults."""


class GenerationError(BCCError):
    """Raised when a generator cannot transform a source script.

    This error is never caught by the caches; it aborts the request.
    """


class FetchError(BCCError):
    """Raised when a remote script cannot be fetched."""
