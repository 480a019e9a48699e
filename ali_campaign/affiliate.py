from __future__ import annotations

"""
Affiliate link generation.

The link-generate response nests its links differently across API
versions and ``simplify`` modes, so instead of trusting one path we walk
the whole JSON tree and harvest every value stored under a known link
field, then prefer the tracking-domain short link.
"""

from typing import Any, List, Mapping, Optional, Sequence, Set

from loguru import logger

from .aliexpress import AliExpressClient
from .config import METHOD_LINK_GENERATE, PROMOTION_LINK_TYPE
from .constants import LINK_FIELDS, LINK_LIST_PATHS, TRACKING_DOMAIN_RE
from .errors import LinkNotFoundError
from .extract import dig
from .pipeline_types import AffiliateLinkSet
from .utils.urls import normalize_item_url


def is_tracking_link(link: str) -> bool:
    return bool(TRACKING_DOMAIN_RE.search(link or ""))


def collect_affiliate_links(tree: Any) -> List[str]:
    """
    Depth-first harvest of link strings from an arbitrary JSON value.

    At each mapping the direct link fields are read first, then the known
    list fields, then every other container value. Each container is
    visited once. Output is de-duplicated in first-seen order.
    """
    found: List[str] = []
    seen_links: Set[str] = set()
    visited: Set[int] = set()

    def visit(node: Any) -> None:
        if not isinstance(node, (Mapping, list)) or id(node) in visited:
            return
        visited.add(id(node))

        if isinstance(node, list):
            for item in node:
                visit(item)
            return

        for field in LINK_FIELDS:
            value = node.get(field)
            if isinstance(value, str) and value and value not in seen_links:
                seen_links.add(value)
                found.append(value)

        for path in LINK_LIST_PATHS:
            value = dig(node, *path)
            if isinstance(value, list):
                visit(value)

        for value in node.values():
            visit(value)

    visit(tree)
    return found


def pick_best_link(links: Sequence[str]) -> Optional[str]:
    if not links:
        return None
    for link in links:
        if is_tracking_link(link):
            return link
    return links[0]


def link_set_from_response(resp: Any) -> AffiliateLinkSet:
    links = collect_affiliate_links(resp)
    best = pick_best_link(links)
    return AffiliateLinkSet(links=links, best=best, is_affiliate=bool(best) and is_tracking_link(best))


def generate_affiliate_link(client: AliExpressClient, product_url: str) -> AffiliateLinkSet:
    """Raises :class:`LinkNotFoundError` when the response holds no link at all."""
    settings = client.settings
    normalized = normalize_item_url(product_url)
    if normalized != product_url:
        logger.info("Normalized product url {} -> {}", product_url, normalized)

    resp = client.call(
        METHOD_LINK_GENERATE,
        {
            "ship_to_country": settings.ship_to_country,
            "promotion_link_type": PROMOTION_LINK_TYPE,
            "source_values": normalized,
            "tracking_id": settings.tracking_id,
        },
    )
    link_set = link_set_from_response(resp)
    if link_set.best is None:
        raise LinkNotFoundError("Affiliate link not found in API response")

    logger.info(
        "Affiliate link resolved ({} candidates, tracking={}): {}",
        len(link_set.links), link_set.is_affiliate, link_set.best,
    )
    return link_set
