"""Per-key de-duplication of concurrent cache fills.

At most one fill per key runs at a time.  Callers that arrive while a fill
is running await the same task and share its outcome, including a raised
exception.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlight(Generic[T]):
    """Registry of running fills keyed by cache key."""

    def __init__(self) -> None:
        self._tasks: dict[Hashable, asyncio.Task[T]] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def _forget(self, key: Hashable, task: asyncio.Task[T]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Run ``factory()`` for *key*, or join the run already in progress."""
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug("Joining in-flight fill for %s", key)
        # shield: a cancelled waiter must not cancel the shared fill
        return await asyncio.shield(task)
