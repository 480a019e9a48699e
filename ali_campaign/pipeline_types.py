"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .config import SEARCH_FIELDS


@dataclass
class ProductCandidate:
    """One upstream product record after field probing."""

    id: Optional[str]
    title: str
    url: Optional[str]


@dataclass
class ScoredCandidate:
    candidate: ProductCandidate
    score: float
    position: int

    @property
    def url(self) -> Optional[str]:
        return self.candidate.url

    @property
    def title(self) -> str:
        return self.candidate.title


@dataclass(frozen=True)
class SearchQuery:
    """Keyword plus the fixed regional parameters sent with every search."""

    keyword: str
    language: str
    currency: str
    ship_to_country: str

    def to_biz_params(self, page_size: int, page_no: int = 1) -> Dict[str, Union[str, int]]:
        return {
            "keywords": self.keyword,
            "search_keyword": self.keyword,
            "page_size": page_size,
            "page_no": page_no,
            "target_language": self.language,
            "target_currency": self.currency,
            "ship_to_country": self.ship_to_country,
            "fields": SEARCH_FIELDS,
        }


@dataclass
class SearchOutcome:
    """
    Result of ranking one search.

    ``tier`` records which selection rule produced the pick (1 = relevance,
    2 = token substring, 3 = any url) so callers can gate on confidence.
    """

    found: bool
    candidate: Optional[ProductCandidate] = None
    score: Optional[float] = None
    tier: Optional[int] = None
    reason: Optional[str] = None


@dataclass
class AffiliateLinkSet:
    links: List[str] = field(default_factory=list)
    best: Optional[str] = None
    is_affiliate: bool = False


@dataclass
class CampaignArtifact:
    ad_copy: str
    video_url: str
    social_post: str
    image_url: str
    image_content_type: str
    image_preview: str
