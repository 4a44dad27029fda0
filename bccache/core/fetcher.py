"""Network access for the remote script cache."""

from __future__ import annotations

import asyncio
import codecs
import logging
import urllib.error
import urllib.request
from typing import Protocol, runtime_checkable

from bccache.core.errors import FetchError

logger = logging.getLogger(__name__)


def _known_charset(charset: str | None) -> str:
    """Return *charset* if Python has a codec for it, else ``utf-8``."""
    if not charset:
        return "utf-8"
    try:
        codecs.lookup(charset)
    except LookupError:
        logger.debug("Unknown charset %r, decoding as utf-8", charset)
        return "utf-8"
    return charset


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for fetching a remote script as text."""

    async def fetch_text(self, url: str) -> str:
        """Return the body at *url*.  Raises ``FetchError`` on any failure."""
        ...


class UrllibFetcher:
    """``Fetcher`` built on ``urllib.request``, run in a worker thread.

    Parameters
    ----------
    timeout:
        Socket timeout in seconds for each request.
    user_agent:
        Value of the ``User-Agent`` header.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = "bccache") -> None:
        self.timeout = timeout
        self.user_agent = user_agent

    def _fetch_sync(self, url: str) -> str:
        try:
            request = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            with urllib.request.urlopen(request, timeout=self.timeout) as resp:
                charset = _known_charset(resp.headers.get_content_charset())
                return resp.read().decode(charset, errors="replace")
        except urllib.error.HTTPError as exc:
            raise FetchError(f"GET {url} returned HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError, ValueError, LookupError) as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc

    async def fetch_text(self, url: str) -> str:
        logger.info("Fetching remote script %s", url)
        return await asyncio.to_thread(self._fetch_sync, url)
