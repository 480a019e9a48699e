from __future__ import annotations

"""
Relevance ranking over normalised product candidates.

Scoring is lexical and cheap: a substring bonus for the whole query plus a
capped token-overlap fraction. Selection then walks a short list of
fallback tiers so a search with *any* clickable candidate never comes back
empty; the score attached to the pick tells callers how much to trust it.
"""

from typing import Callable, List, Optional, Sequence

from loguru import logger

from . import config
from .normalize import meaningful_tokens, normalize_text
from .pipeline_types import ProductCandidate, ScoredCandidate, SearchOutcome

REASON_EMPTY = "empty_after_extract"
REASON_NO_URL = "no_url_anywhere"


def relevance_score(
    title: str | None,
    query: str | None,
    substring_weight: float = config.SUBSTRING_WEIGHT,
    overlap_weight: float = config.OVERLAP_WEIGHT,
    token_cap: int = config.OVERLAP_TOKEN_CAP,
) -> float:
    t_norm = normalize_text(title)
    q_norm = normalize_text(query)
    if not t_norm or not q_norm:
        return 0.0

    score = 0.0
    if q_norm in t_norm:
        score += substring_weight

    title_tokens = set(t_norm.split(" "))
    query_tokens = meaningful_tokens(q_norm)
    overlap = sum(1 for tok in query_tokens if tok in title_tokens)
    score += (overlap / min(token_cap, max(1, len(query_tokens)))) * overlap_weight
    return score


def rank_candidates(candidates: Sequence[ProductCandidate], query: str) -> List[ScoredCandidate]:
    """Descending by score; ``sorted`` is stable so ties keep upstream order."""
    scored = [
        ScoredCandidate(candidate=c, score=relevance_score(c.title, query), position=i)
        for i, c in enumerate(candidates)
    ]
    return sorted(scored, key=lambda s: -s.score)


# ---------------------------------------------------------------------------
# Selection tiers
# ---------------------------------------------------------------------------

Tier = Callable[[Sequence[ProductCandidate], str], Optional[ScoredCandidate]]


def _best_scored(candidates: Sequence[ProductCandidate], query: str) -> Optional[ScoredCandidate]:
    for sc in rank_candidates(candidates, query):
        if sc.url and sc.score > 0:
            return sc
    return None


def _first_token_match(candidates: Sequence[ProductCandidate], query: str) -> Optional[ScoredCandidate]:
    tokens = meaningful_tokens(query)
    if not tokens:
        return None
    for i, c in enumerate(candidates):
        if not c.url:
            continue
        title = normalize_text(c.title)
        if any(tok in title for tok in tokens):
            return ScoredCandidate(candidate=c, score=config.TOKEN_MATCH_CONFIDENCE, position=i)
    return None


def _first_with_url(candidates: Sequence[ProductCandidate], query: str) -> Optional[ScoredCandidate]:
    for i, c in enumerate(candidates):
        if c.url:
            return ScoredCandidate(candidate=c, score=config.ANY_URL_CONFIDENCE, position=i)
    return None


SELECTION_TIERS: List[Tier] = [_best_scored, _first_token_match, _first_with_url]


def select_best(candidates: Sequence[ProductCandidate], query: str) -> SearchOutcome:
    if not candidates:
        return SearchOutcome(found=False, reason=REASON_EMPTY)

    for tier_no, tier in enumerate(SELECTION_TIERS, start=1):
        pick = tier(candidates, query)
        if pick is not None:
            logger.info(
                "Selected candidate #{} (tier {}, score {:.2f}) for '{}'",
                pick.position, tier_no, pick.score, query,
            )
            return SearchOutcome(found=True, candidate=pick.candidate, score=pick.score, tier=tier_no)

    logger.info("No candidate with a url among {} for '{}'", len(candidates), query)
    return SearchOutcome(found=False, reason=REASON_NO_URL)
