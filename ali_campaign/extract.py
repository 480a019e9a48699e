from __future__ import annotations

"""
Forgiving extraction of product records from upstream search payloads.

The response shape differs by API method and is not contractually stable,
so each lookup is an ordered list of small extractor functions; the first
one that yields something wins. Nothing in this module raises on
unexpected input.
"""

from typing import Any, Callable, List, Mapping, Optional, Sequence

from .constants import (
    GENERIC_LIST_KEYS,
    PRODUCT_ID_FIELDS,
    PRODUCT_TITLE_FIELDS,
    PRODUCT_URL_FIELDS,
    RESPONSE_ENVELOPES,
)
from .normalize import basic_clean
from .pipeline_types import ProductCandidate

RootExtractor = Callable[[Any], Optional[Mapping[str, Any]]]
ListExtractor = Callable[[Mapping[str, Any]], Optional[List[Any]]]


def dig(obj: Any, *path: str) -> Any:
    """Follow ``path`` through nested mappings; ``None`` on any miss."""
    cur = obj
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _mapping_or_none(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _list_or_none(value: Any) -> Optional[List[Any]]:
    return value if isinstance(value, list) and value else None


def _root_at(*path: str) -> RootExtractor:
    return lambda resp: _mapping_or_none(dig(resp, *path))


ROOT_EXTRACTORS: List[RootExtractor] = [_root_at("resp_result", "result")] + [
    _root_at(envelope, "resp_result", "result") for envelope in RESPONSE_ENVELOPES
]

def _list_at(*path: str) -> ListExtractor:
    return lambda root: _list_or_none(dig(root, *path))


LIST_EXTRACTORS: List[ListExtractor] = [
    _list_at("products"),
    _list_at("products", "product"),
] + [_list_at(key) for key in GENERIC_LIST_KEYS]


def response_root(resp: Any) -> Optional[Mapping[str, Any]]:
    for extractor in ROOT_EXTRACTORS:
        root = extractor(resp)
        if root is not None:
            return root
    return None


def extract_products(resp: Any) -> List[Any]:
    """Raw product records in upstream order; ``[]`` when nothing matches."""
    root = response_root(resp)
    if root is None:
        return []
    for extractor in LIST_EXTRACTORS:
        found = extractor(root)
        if found:
            return found
    return []


def _first_field(record: Mapping[str, Any], fields: Sequence[str]) -> Optional[Any]:
    for name in fields:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def canonicalize(record: Any) -> ProductCandidate:
    if not isinstance(record, Mapping):
        return ProductCandidate(id=None, title="", url=None)

    raw_id = _first_field(record, PRODUCT_ID_FIELDS)
    raw_title = _first_field(record, PRODUCT_TITLE_FIELDS)
    raw_url = _first_field(record, PRODUCT_URL_FIELDS)

    url = str(raw_url).strip() if raw_url is not None else ""
    return ProductCandidate(
        id=str(raw_id) if raw_id is not None else None,
        title=basic_clean(raw_title),
        url=url or None,
    )


def canonicalize_all(records: Sequence[Any]) -> List[ProductCandidate]:
    return [canonicalize(r) for r in records]
