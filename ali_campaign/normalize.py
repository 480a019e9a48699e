from __future__ import annotations

"""
Text normalisation helpers shared by the normalizer and the ranker.

Public helpers:

* basic_clean(text) -> str
    Light-weight clean for display strings coming back from upstream
    (product titles): drops the inline highlight tags the search API wraps
    around matched words, normalises unicode and whitespace. Any other
    angle-bracketed text (``Adapter <USB-C> to HDMI``) is product text and
    is kept.

* normalize_text(text) -> str
    Matching form used for relevance scoring. Lowercase, NFKC, anything
    that is not a letter, digit or whitespace becomes a space.

* tokenize(text) / meaningful_tokens(text) -> List[str]
    Whitespace tokens of the matching form; ``meaningful_tokens`` also
    drops the bilingual stop words.
"""

import re
import unicodedata
from typing import List

from .constants import STOP_WORDS

_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_SPACE_RE = re.compile(r"\s+")
_HIGHLIGHT_TAG_RE = re.compile(
    r"</?(b|strong|em|i|u|font|span|mark|sup|sub|br)(?:\s[^<>]*)?/?>",
    re.IGNORECASE,
)


def _strip_highlight_tags(text: str) -> str:
    if "<" not in text:
        return text
    return _HIGHLIGHT_TAG_RE.sub(lambda m: " " if m.group(1).lower() == "br" else "", text)


def _normalise_unicode(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("‘", "'").replace("’", "'")
    text = text.replace("“", '"').replace("”", '"')
    text = text.replace("–", "-").replace("—", "-")
    return text


def basic_clean(text: str | None) -> str:
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = _strip_highlight_tags(text)
    text = _normalise_unicode(text)
    return _SPACE_RE.sub(" ", text).strip()


def normalize_text(text: str | None) -> str:
    """Idempotent: ``normalize_text(normalize_text(s)) == normalize_text(s)``."""
    if not text:
        return ""
    # lower() after NFKC: compatibility forms such as U+210C fold to uppercase
    norm = unicodedata.normalize("NFKC", str(text)).lower()
    norm = _NON_WORD_RE.sub(" ", norm)
    return _SPACE_RE.sub(" ", norm).strip()


def tokenize(text: str | None) -> List[str]:
    norm = normalize_text(text)
    return norm.split(" ") if norm else []


def meaningful_tokens(text: str | None) -> List[str]:
    return [t for t in tokenize(text) if t not in STOP_WORDS]
