from __future__ import annotations

"""
Main-image discovery on a product page.

Probes run in a fixed order, most reliable first: social meta tags, then
structured data, then patterns scraped out of inline scripts / raw HTML.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from bs4 import BeautifulSoup
from loguru import logger

from .constants import CDN_IMAGE_RE, IMAGE_PATH_RE
from .errors import ImageNotFoundError
from .utils.urls import ensure_scheme


@dataclass
class ProductPage:
    html: str
    soup: BeautifulSoup

    @classmethod
    def parse(cls, html: str) -> "ProductPage":
        return cls(html=html, soup=BeautifulSoup(html, "lxml"))


ImageProbe = Callable[[ProductPage], Optional[str]]


def _meta_content(page: ProductPage, key: str, attrs=("property", "name")) -> Optional[str]:
    for attr in attrs:
        tag = page.soup.find("meta", attrs={attr: key})
        if tag is not None and tag.get("content"):
            return tag["content"].strip()
    return None


def probe_og_image(page: ProductPage) -> Optional[str]:
    return _meta_content(page, "og:image")


def probe_twitter_image(page: ProductPage) -> Optional[str]:
    return _meta_content(page, "twitter:image", attrs=("name", "property"))


def _image_field(obj: Any) -> Optional[str]:
    if not isinstance(obj, dict):
        return None
    image = obj.get("image")
    if isinstance(image, str) and image:
        return image
    if isinstance(image, list) and image and isinstance(image[0], str):
        return image[0]
    return None


def probe_json_ld(page: ProductPage) -> Optional[str]:
    for script in page.soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.get_text().strip())
        except ValueError:
            continue
        nodes = data if isinstance(data, list) else [data]
        for node in nodes:
            image = _image_field(node)
            if image:
                return image
    return None


def probe_image_path(page: ProductPage) -> Optional[str]:
    m = IMAGE_PATH_RE.search(page.html)
    return m.group(1) if m else None


def probe_cdn_url(page: ProductPage) -> Optional[str]:
    m = CDN_IMAGE_RE.search(page.html)
    return m.group(0) if m else None


IMAGE_PROBES: List[ImageProbe] = [
    probe_og_image,
    probe_twitter_image,
    probe_json_ld,
    probe_image_path,
    probe_cdn_url,
]


def find_main_image(html: str) -> str:
    page = ProductPage.parse(html)
    for probe in IMAGE_PROBES:
        found = probe(page)
        if found:
            logger.debug("Main image found by {}: {}", probe.__name__, found)
            return ensure_scheme(found)
    raise ImageNotFoundError("main image not found")
