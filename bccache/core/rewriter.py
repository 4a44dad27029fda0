"""Rewrite remote source URLs in generated code to point at the local cache.

Substitution is purely textual: a registered base URL is replaced only
where it appears verbatim.  Trailing slashes, letter case and
percent-encoding are not normalized.
"""

from __future__ import annotations

from collections.abc import Mapping


def local_source_url(local_base: str, handle: str) -> str:
    """Where the local mirror of *handle* is served: ``{local_base}/{handle}/``."""
    return f"{local_base}/{handle}/"


def rewrite(
    code: str,
    enabled: bool,
    registry: Mapping[str, str],
    local_base: str,
) -> str:
    """Replace each registered base URL in *code* with its local mirror URL.

    Handles are applied in the registry's iteration order.  When *enabled*
    is false the code is returned unchanged.
    """
    if not enabled:
        return code
    for handle, base_url in registry.items():
        if not base_url:
            continue
        code = code.replace(base_url, local_source_url(local_base, handle))
    return code
