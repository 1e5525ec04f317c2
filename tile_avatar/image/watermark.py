"""Watermark image retrieval and decoding.

Processing flow:
    1. Resolve the configured watermark location (HTTP(S) URL or local path).
    2. Fetch the raw bytes (`httpx.AsyncClient`, bounded timeout, redirects on).
    3. Decode with Pillow and convert to RGBA.
    4. Optionally keep the decoded image for the lifetime of the process.

Retry behavior:
    Transient statuses (`429,500,502,503,504`) and transport errors are retried
    up to `retry_attempts` times with exponential backoff. The default of one
    attempt means no retry.

Caching:
    With `cache_enabled`, the first successful decode is stored on the source
    instance and every caller receives its own copy. Concurrent first loads
    are serialized by an `asyncio.Lock`, so the resource is fetched once.

Error handling strategy:
    Every failure (transport, HTTP status, unreadable file, undecodable body)
    is raised as `WatermarkError`. Callers never receive a partial image.
"""

from __future__ import annotations

import asyncio
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from tile_avatar.config import (
    WATERMARK_BACKOFF_SECONDS,
    WATERMARK_CACHE,
    WATERMARK_RETRY_ATTEMPTS,
    WATERMARK_TIMEOUT_SECONDS,
    WATERMARK_URL,
    WATERMARK_USER_AGENT,
)


logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


class WatermarkError(RuntimeError):
    """Raised when the watermark cannot be fetched or decoded."""


class WatermarkProvider(Protocol):
    """Minimal async interface required by `render_avatar`."""

    async def aload(self) -> Image.Image:
        """Return the decoded RGBA watermark image."""
        ...


@dataclass(frozen=True)
class WatermarkConfig:
    """Runtime configuration for `WatermarkSource`.

    Defaults come from `tile_avatar.config`, which reads the environment.
    """

    url: str = WATERMARK_URL
    timeout_seconds: float = WATERMARK_TIMEOUT_SECONDS
    retry_attempts: int = WATERMARK_RETRY_ATTEMPTS
    backoff_seconds: float = WATERMARK_BACKOFF_SECONDS
    cache_enabled: bool = WATERMARK_CACHE
    user_agent: str = WATERMARK_USER_AGENT


class WatermarkSource:
    """Loads the branding watermark as a decoded RGBA Pillow image."""

    def __init__(
        self,
        config: WatermarkConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the watermark source.

        Args:
            config: Location/network configuration. Defaults to environment.
            transport: Optional httpx transport override (tests, proxies).

        Raises:
            WatermarkError: If no watermark location is configured.
        """
        self.config = config or WatermarkConfig()
        if not self.config.url:
            raise WatermarkError("WATERMARK_URL not configured")
        self._transport = transport
        self._cached: Image.Image | None = None
        self._lock = asyncio.Lock()

    @property
    def is_cached(self) -> bool:
        return self._cached is not None

    def clear_cache(self) -> None:
        self._cached = None

    async def aload(self) -> Image.Image:
        """Return the decoded watermark, fetching it if needed.

        Raises:
            WatermarkError: On any fetch or decode failure.
        """
        if not self.config.cache_enabled:
            return await self._load_uncached()

        if self._cached is None:
            async with self._lock:
                if self._cached is None:
                    self._cached = await self._load_uncached()
                    logger.info(
                        "Cached watermark %s (%dx%d)",
                        self.config.url,
                        self._cached.width,
                        self._cached.height,
                    )
        return self._cached.copy()

    async def _load_uncached(self) -> Image.Image:
        raw = await self._read_bytes()
        return self._decode(raw)

    async def _read_bytes(self) -> bytes:
        url = self.config.url
        if self._is_http_url(url):
            return await self._fetch_with_retry(url)
        return await asyncio.to_thread(self._read_local, url)

    async def _fetch_with_retry(self, url: str) -> bytes:
        """GET `url` with the configured retry/backoff policy.

        Raises:
            WatermarkError: After retry exhaustion or on unrecoverable status.
        """
        attempts = max(1, self.config.retry_attempts)

        for attempt in range(attempts):
            try:
                async with httpx.AsyncClient(
                    timeout=self.config.timeout_seconds,
                    follow_redirects=True,
                    headers={"User-Agent": self.config.user_agent},
                    transport=self._transport,
                ) as client:
                    response = await client.get(url)

                if response.status_code in _TRANSIENT_STATUSES and attempt < attempts - 1:
                    logger.warning(
                        "Watermark fetch returned %s (attempt %d/%d)",
                        response.status_code,
                        attempt + 1,
                        attempts,
                    )
                    await asyncio.sleep(self._backoff(attempt))
                    continue

                response.raise_for_status()
                return response.content

            except httpx.HTTPStatusError as exc:
                raise WatermarkError(
                    f"Watermark fetch failed with status {exc.response.status_code}: {url}"
                ) from exc

            except httpx.RequestError as exc:
                if attempt < attempts - 1:
                    logger.warning(
                        "Watermark fetch error %r (attempt %d/%d)",
                        exc,
                        attempt + 1,
                        attempts,
                    )
                    await asyncio.sleep(self._backoff(attempt))
                    continue
                raise WatermarkError(f"Watermark fetch failed: {url}") from exc

        raise WatermarkError(f"Watermark fetch failed without error details: {url}")

    @staticmethod
    def _read_local(location: str) -> bytes:
        if location.startswith("file://"):
            parsed = urlparse(location)
            if parsed.netloc not in ("", "localhost"):
                raise WatermarkError(f"Remote file URLs are not supported: {location}")
            location = unquote(parsed.path or "")
        path = Path(os.path.expanduser(location))
        try:
            return path.read_bytes()
        except OSError as exc:
            raise WatermarkError(f"Watermark file unreadable: {path}") from exc

    @staticmethod
    def _decode(raw: bytes) -> Image.Image:
        if not raw:
            raise WatermarkError("Watermark body is empty")
        try:
            with Image.open(io.BytesIO(raw)) as image:
                image.load()
                return image.convert("RGBA")
        except (UnidentifiedImageError, OSError) as exc:
            raise WatermarkError("Watermark body is not a decodable image") from exc

    def _backoff(self, attempt: int) -> float:
        return self.config.backoff_seconds * (2 ** attempt)

    @staticmethod
    def _is_http_url(url: str) -> bool:
        parsed = urlparse(url)
        return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


# ============================================================
# Process-wide default
# ============================================================

_DEFAULT_SOURCE: WatermarkProvider | None = None


def set_watermark_source(source: WatermarkProvider | None) -> None:
    """Override or clear the default source used by `render_avatar`."""
    global _DEFAULT_SOURCE
    _DEFAULT_SOURCE = source


def get_watermark_source() -> WatermarkProvider:
    """Return the process-wide source, creating it from the environment once."""
    global _DEFAULT_SOURCE
    if _DEFAULT_SOURCE is None:
        _DEFAULT_SOURCE = WatermarkSource()
    return _DEFAULT_SOURCE
