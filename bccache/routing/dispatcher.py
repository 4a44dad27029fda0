"""RouteDispatcher — maps request paths to CacheManager operations.

The first binding whose pattern matches the path handles the request.
Bindings for features the manager has not configured never match, so
those paths pass through to whatever handles them next.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from bccache.core.manager import CacheManager
from bccache.models.config import ArtifactKind
from bccache.models.results import CacheHit, CacheResult
from bccache.models.routing import (
    DEFAULT_BINDINGS,
    RouteBinding,
    RouteKind,
    RouteResponse,
)

logger = logging.getLogger(__name__)

_ARTIFACT_ROUTES: dict[RouteKind, ArtifactKind] = {
    RouteKind.BUNDLE: ArtifactKind.BUNDLE,
    RouteKind.COMPILE: ArtifactKind.COMPILE,
    RouteKind.TRANSPILE: ArtifactKind.TRANSPILE,
}


class RouteConfigError(ValueError):
    """Raised when a route pattern cannot serve its bound operation."""


@dataclass(frozen=True)
class _CompiledRoute:
    kind: RouteKind
    regex: re.Pattern[str]


class RouteDispatcher:
    """Routes request paths to the cache operation bound to them.

    Parameters
    ----------
    manager:
        The cache facade that serves matched requests.
    bindings:
        Pattern bindings, tried in order.  Defaults to ``/bundled/(.+)``,
        ``/compiled/(.+)``, ``/transpiled/(.+)`` and ``/cache/(.+?)/(.+)``.
        Passing a binding for a kind replaces the default for that kind.
    strict_status:
        When ``False`` (default) every handled request is answered with
        status 200 and failures are served as throwing sentinel scripts.
        When ``True`` disabled and missing results are answered with 404.

    Usage
    -----
    >>> dispatcher = RouteDispatcher(manager)
    >>> response = await dispatcher.dispatch("/compiled/app")
    >>> response.body if response else "pass through"
    """

    def __init__(
        self,
        manager: CacheManager,
        bindings: Iterable[RouteBinding] | None = None,
        *,
        strict_status: bool = False,
    ) -> None:
        self.manager = manager
        self.strict_status = strict_status
        self._routes: list[_CompiledRoute] = []

        merged: dict[RouteKind, RouteBinding] = {b.kind: b for b in DEFAULT_BINDINGS}
        for binding in bindings or ():
            merged[binding.kind] = binding

        for binding in merged.values():
            if binding.pattern is None or not self._kind_enabled(binding.kind):
                logger.debug("Route %s disabled", binding.kind.value)
                continue
            regex = re.compile(binding.pattern)
            needed = 2 if binding.kind is RouteKind.CACHE else 1
            if regex.groups < needed:
                raise RouteConfigError(
                    f"Pattern {binding.pattern!r} for {binding.kind.value} "
                    f"needs {needed} capture group(s), has {regex.groups}"
                )
            self._routes.append(_CompiledRoute(binding.kind, regex))

    def _kind_enabled(self, kind: RouteKind) -> bool:
        if kind is RouteKind.CACHE:
            return self.manager.remote_enabled
        return self.manager.is_enabled(_ARTIFACT_ROUTES[kind])

    @property
    def active_routes(self) -> list[RouteKind]:
        """Kinds with a live route, in matching order."""
        return [route.kind for route in self._routes]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def status_for(self, result: CacheResult) -> int:
        if not self.strict_status or isinstance(result, CacheHit):
            return 200
        return 404

    async def dispatch(self, path: str) -> RouteResponse | None:
        """Serve *path* from the cache, or return ``None`` if no route matches."""
        for route in self._routes:
            match = route.regex.search(path)
            if match is None:
                continue

            if route.kind is RouteKind.CACHE:
                handle, script = match.group(1), match.group(2)
                result = await self.manager.script_cache(script, handle)
            else:
                script = match.group(1)
                result = await self.manager.cached(_ARTIFACT_ROUTES[route.kind], script)

            if not result.ok:
                logger.info("%s %s: %s", route.kind.value, path, result.message)
            return RouteResponse(
                body=result.body,
                status_code=self.status_for(result),
                result=result,
            )
        return None
