"""Fingerprint helpers for content addressing of remote cache entries.

The remote cache names each entry after the MD5 hex digest of the requested
script path, so the on-disk layout is ``{cache_dir}/{handle}/{md5(path)}``.
The digest is a file name, not a security boundary.
"""

from __future__ import annotations

import hashlib


def md5_hex(data: bytes) -> str:
    """Return the MD5 hex digest of raw bytes."""
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def fingerprint(text: str) -> str:
    """Stable fixed-length identifier for a piece of text (UTF-8 encoded)."""
    return md5_hex(text.encode("utf-8"))
