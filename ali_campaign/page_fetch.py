from __future__ import annotations

from typing import Optional, Tuple

import httpx
from loguru import logger

from .config import BROWSER_HEADERS, IMAGE_MAX_BYTES, PAGE_MAX_BYTES, Settings
from .errors import ImageFetchError, PageFetchError

DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


class PageFetcher:
    """
    Fetches product pages and images with browser-like headers.

    Hardening:
      - httpx with connect/read timeouts, redirects followed (affiliate
        short links bounce through several hops)
      - byte caps for HTML and images
      - no retries
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self._http = http_client or httpx.Client(
            headers=BROWSER_HEADERS,
            follow_redirects=True,
            timeout=httpx.Timeout(settings.http_read_timeout, connect=settings.http_connect_timeout),
        )

    def close(self) -> None:
        self._http.close()

    def _get(self, url: str, error_cls: type) -> httpx.Response:
        try:
            r = self._http.get(url, headers=BROWSER_HEADERS)
        except httpx.HTTPError as e:
            raise error_cls(f"fetch failed for {url}: {e}") from e
        if r.status_code >= 400:
            raise error_cls(f"fetch failed: HTTP {r.status_code} for {url}")
        return r

    def fetch_html(self, url: str) -> str:
        logger.info("Fetching product page: {}", url)
        r = self._get(url, PageFetchError)
        if len(r.content) > PAGE_MAX_BYTES:
            raise PageFetchError(f"Page too large ({len(r.content)} bytes) for {url}")
        return r.text

    def download_image(self, url: str) -> Tuple[bytes, str]:
        """Returns ``(bytes, content_type)``."""
        logger.info("Downloading image: {}", url)
        r = self._get(url, ImageFetchError)
        if not r.content:
            raise ImageFetchError(f"Empty image body for {url}")
        if len(r.content) > IMAGE_MAX_BYTES:
            raise ImageFetchError(f"Image too large ({len(r.content)} bytes) for {url}")
        content_type = r.headers.get("content-type") or DEFAULT_IMAGE_CONTENT_TYPE
        return r.content, content_type.split(";")[0].strip()
