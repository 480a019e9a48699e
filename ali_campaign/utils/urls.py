# ali_campaign/utils/urls.py
from __future__ import annotations
from urllib.parse import urlparse

from ..constants import ALIEXPRESS_DOMAINS, CANONICAL_ITEM_URL, ITEM_PATH_RE

__all__ = ["normalize_item_url", "ensure_scheme", "is_aliexpress_host"]


def is_aliexpress_host(host: str) -> bool:
    host = (host or "").strip().lower()
    return any(host == d or host.endswith("." + d) for d in ALIEXPRESS_DOMAINS)


def normalize_item_url(u: str) -> str:
    """
    Canonicalize an AliExpress product URL before link generation.

    Strategy:
    - host must be an AliExpress domain (any subdomain / locale)
    - path must contain /item/<digits>.html
    - rebuild as: https://www.aliexpress.com/item/<digits>.html

    Anything else, including unparsable input, is returned unchanged:
    - https://he.aliexpress.com/item/1005001.html?spm=a2g0o -> .../item/1005001.html
    - https://s.click.aliexpress.com/e/_abc               -> unchanged
    """
    if not u:
        return u
    try:
        p = urlparse(u.strip())
        host = p.hostname or ""
    except ValueError:
        return u

    if not is_aliexpress_host(host):
        return u
    m = ITEM_PATH_RE.search(p.path or "")
    if not m:
        return u
    return CANONICAL_ITEM_URL.format(item_id=m.group(1))


def ensure_scheme(u: str) -> str:
    """Protocol-relative ``//host/path`` URLs become https."""
    return "https:" + u if u and u.startswith("//") else u
