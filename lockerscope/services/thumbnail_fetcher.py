"""
Thumbnail acquisition.

Fetches item images for the renderer with a bounded number of concurrent
requests and a flat-file cache.

INVARIANTS:
- At most max_concurrency network fetches are in flight at once
- A cache hit never takes a semaphore slot or touches the network
- A failed fetch yields None for that item only; nothing is raised
- No retries (retry policy belongs to the caller)
"""

import asyncio
import logging
import re
from pathlib import Path
from types import TracebackType

import httpx

from lockerscope.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w]")


def cache_filename(url: str, size: int) -> str:
    """Flat cache file name for a URL at a thumbnail size."""
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', url)}_{size}x{size}.img"


class ThumbnailFetcher:
    """
    Async image fetcher bounded by a counting semaphore.

    Usage:
        async with ThumbnailFetcher(cache_dir=path) as fetcher:
            image = await fetcher.fetch(url, 200)
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        max_concurrency: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            cache_dir: Directory for cached images. None disables caching
            max_concurrency: Concurrent fetch limit. Defaults to settings
            timeout: Per-request timeout in seconds. Defaults to settings
            client: Optional httpx client (not closed by the fetcher)
        """
        self._cache_dir = cache_dir
        self._max_concurrency = max_concurrency or settings.image_max_concurrency
        self._timeout = timeout or settings.image_timeout_seconds
        self._semaphore = asyncio.Semaphore(self._max_concurrency)
        self._client = client
        self._owns_client = False

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def __aenter__(self) -> "ThumbnailFetcher":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
            self._owns_client = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    def _cache_path(self, url: str, size: int) -> Path | None:
        if self._cache_dir is None:
            return None
        return self._cache_dir / cache_filename(url, size)

    def _read_cache(self, path: Path | None) -> bytes | None:
        if path is None:
            return None
        try:
            if not path.exists():
                return None
            return path.read_bytes()
        except OSError as e:
            logger.warning("Unreadable cached thumbnail %s: %s", path, e)
            return None

    def _write_cache(self, path: Path | None, content: bytes) -> None:
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            logger.warning("Could not cache thumbnail %s: %s", path, e)

    async def fetch(self, url: str | None, size: int) -> bytes | None:
        """
        Fetch one image.

        Args:
            url: Image URL. None or empty returns None without a request
            size: Thumbnail size the image is destined for (cache key)

        Returns:
            Raw image bytes, or None if unavailable
        """
        if not url:
            return None

        cache_path = self._cache_path(url, size)
        cached = await asyncio.to_thread(self._read_cache, cache_path)
        if cached is not None:
            return cached

        async with self._semaphore:
            content = await self._download(url)

        if content is not None:
            await asyncio.to_thread(self._write_cache, cache_path, content)
        return content

    async def _download(self, url: str) -> bytes | None:
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout,
                    headers={"User-Agent": USER_AGENT},
                    follow_redirects=True,
                ) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "THUMBNAIL_FETCH_FAILED",
                extra={"url": url, "error": str(e)},
            )
            return None

        return response.content
