"""Routing models — path pattern bindings and dispatch responses."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from bccache.models.results import CacheResult

SCRIPT_MEDIA_TYPE = "text/javascript"


class RouteKind(str, Enum):
    """Which ``CacheManager`` operation a route is bound to."""

    BUNDLE = "bundle"
    COMPILE = "compile"
    TRANSPILE = "transpile"
    CACHE = "cache"


class RouteBinding(BaseModel):
    """A request path pattern bound to one cache operation.

    ``pattern`` is a regular expression searched against the request path.
    Group 1 captures the script; for ``RouteKind.CACHE`` group 1 is the
    source handle and group 2 the script.  A ``None`` pattern disables the
    route entirely.
    """

    model_config = ConfigDict(frozen=True)

    kind: RouteKind
    pattern: str | None


DEFAULT_BINDINGS: tuple[RouteBinding, ...] = (
    RouteBinding(kind=RouteKind.BUNDLE, pattern=r"/bundled/(.+)"),
    RouteBinding(kind=RouteKind.COMPILE, pattern=r"/compiled/(.+)"),
    RouteBinding(kind=RouteKind.TRANSPILE, pattern=r"/transpiled/(.+)"),
    RouteBinding(kind=RouteKind.CACHE, pattern=r"/cache/(.+?)/(.+)"),
)


class RouteResponse(BaseModel):
    """What the delivery layer should send back for a handled request."""

    model_config = ConfigDict(frozen=True)

    body: str
    media_type: str = SCRIPT_MEDIA_TYPE
    status_code: int = 200
    result: CacheResult
