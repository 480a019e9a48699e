from __future__ import annotations

"""Keyword search: signed upstream query -> normalised candidates -> pick."""

from typing import Any, Dict, Optional

from loguru import logger

from .aliexpress import AliExpressClient
from .config import (
    DEBUG_DEFAULT_KEYWORDS,
    DEBUG_PAGE_SIZE,
    METHOD_PRODUCT_QUERY,
    SEARCH_PAGE_SIZE,
    Settings,
)
from .extract import canonicalize_all, extract_products
from .pipeline_types import SearchOutcome, SearchQuery
from .ranking import select_best


def build_query(keyword: str, settings: Settings) -> SearchQuery:
    return SearchQuery(
        keyword=keyword,
        language=settings.target_language,
        currency=settings.target_currency,
        ship_to_country=settings.ship_to_country,
    )


def find_by_name(client: AliExpressClient, keyword: str) -> SearchOutcome:
    query = build_query(keyword, client.settings)
    data = client.call(METHOD_PRODUCT_QUERY, query.to_biz_params(SEARCH_PAGE_SIZE))

    raw = extract_products(data)
    logger.info("Search '{}' returned {} raw products", keyword, len(raw))
    return select_best(canonicalize_all(raw), keyword)


def debug_search(client: AliExpressClient, keywords: Optional[str] = None) -> Dict[str, Any]:
    """Raw payload of a small search, for inspecting upstream shapes."""
    query = build_query(keywords or DEBUG_DEFAULT_KEYWORDS, client.settings)
    return client.call(METHOD_PRODUCT_QUERY, query.to_biz_params(DEBUG_PAGE_SIZE))
