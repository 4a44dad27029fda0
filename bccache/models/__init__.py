"""bccache data models — all Pydantic v2, all frozen (immutable)."""

from bccache.models.config import (
    REMOTE_OPERATION,
    ArtifactKind,
    CacheConfig,
    OutputDisabled,
    OutputEnabled,
    OutputSetting,
    output_setting,
)
from bccache.models.results import CacheDisabled, CacheHit, CacheMiss, CacheResult
from bccache.models.routing import (
    DEFAULT_BINDINGS,
    SCRIPT_MEDIA_TYPE,
    RouteBinding,
    RouteKind,
    RouteResponse,
)

__all__ = [
    # config
    "ArtifactKind",
    "CacheConfig",
    "OutputDisabled",
    "OutputEnabled",
    "OutputSetting",
    "REMOTE_OPERATION",
    "output_setting",
    # results
    "CacheDisabled",
    "CacheHit",
    "CacheMiss",
    "CacheResult",
    # routing
    "DEFAULT_BINDINGS",
    "SCRIPT_MEDIA_TYPE",
    "RouteBinding",
    "RouteKind",
    "RouteResponse",
]
