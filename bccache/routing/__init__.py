"""bccache request routing — maps request paths to cache operations.

``RouteDispatcher`` matches a path against pattern bindings and serves the
bound ``CacheManager`` operation; unmatched paths pass through.
``install_middleware`` plugs a dispatcher into a FastAPI application.
"""

from bccache.routing.dispatcher import RouteConfigError, RouteDispatcher

__all__ = ["RouteConfigError", "RouteDispatcher"]
