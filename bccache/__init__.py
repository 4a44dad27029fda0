"""bccache: lazy Bundle-Compile-Cache.

Produces bundled, compiled and transpiled artifacts of source scripts on
first request and serves them from disk afterwards.  Scripts from
registered remote sources are mirrored in a content-addressed cache, and
generated code can be rewritten to load those mirrors locally.
"""

__version__ = "0.1.0"

from bccache.core.manager import CacheManager
from bccache.models.config import ArtifactKind, CacheConfig
from bccache.routing.dispatcher import RouteDispatcher

__all__ = ["ArtifactKind", "CacheConfig", "CacheManager", "RouteDispatcher", "__version__"]
