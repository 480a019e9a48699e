from __future__ import annotations

"""Field-name vocabularies and fixed word lists shared across modules.

The upstream API names the same thing differently depending on the method
and response variant, so every probe below is an ordered tuple: earlier
entries win.
"""

import re

# English + Hebrew function words dropped from query tokens before scoring.
STOP_WORDS = frozenset(
    [
        "the", "and", "or", "for", "with", "a", "an", "to", "of", "in",
        "on", "by", "from", "at", "is", "are",
        "של", "עם", "או", "ו", "על", "אל", "את", "זה", "זו", "אלה",
        "ל", "מ", "לא",
    ]
)

# ---------------------------------------------------------------------------
# Product records
# ---------------------------------------------------------------------------

PRODUCT_ID_FIELDS = ("product_id", "item_id", "id")
PRODUCT_TITLE_FIELDS = ("product_title", "title")
PRODUCT_URL_FIELDS = (
    "promotion_link",
    "product_detail_url",
    "product_url",
    "detail_url",
    "url",
    "promotion_url",
)

# Method-specific envelopes wrapping ``resp_result.result``.
RESPONSE_ENVELOPES = (
    "aliexpress_affiliate_product_query_response",
    "aliexpress_affiliate_product_search_response",
    "aliexpress_affiliate_hotproduct_query_response",
)

# Generic list keys tried after ``products`` / ``products.product``.
GENERIC_LIST_KEYS = ("items", "result_list")

# ---------------------------------------------------------------------------
# Affiliate links
# ---------------------------------------------------------------------------

LINK_FIELDS = ("promotion_link", "promotion_short_link", "promotionUrl")

LINK_LIST_PATHS = (
    ("promotion_links",),
    ("promotion_link_list",),
    ("result_list",),
    ("links",),
    ("products",),
    ("product_list", "product"),
)

TRACKING_DOMAIN_RE = re.compile(r"s\.click\.aliexpress\.com", re.I)

ALIEXPRESS_DOMAINS = ("aliexpress.com", "aliexpress.us")
ITEM_PATH_RE = re.compile(r"/item/(\d+)\.html", re.I)
CANONICAL_ITEM_URL = "https://www.aliexpress.com/item/{item_id}.html"

# ---------------------------------------------------------------------------
# Product page image discovery
# ---------------------------------------------------------------------------

IMAGE_PATH_RE = re.compile(r'"imagePath"\s*:\s*"([^"]+)"', re.I)
CDN_IMAGE_RE = re.compile(r"https?://ae01\.alicdn\.com/[^\s\"'<>]+", re.I)

# ---------------------------------------------------------------------------
# Prompts / post template
# ---------------------------------------------------------------------------

AD_COPY_SYSTEM_PROMPT = (
    "You are a creative ad copywriter. "
    "Create concise, high-converting social ad copy in Hebrew."
)
AD_COPY_DEFAULT_BRIEF = "כתוב טקסט קצר, ממוקד המרה, לטיקטוק/אינסטגרם. הוסף קריאה לפעולה."
AD_COPY_TITLE_LABEL = "שם המוצר"

IDEA_SYSTEM_PROMPT = """You are an e-commerce product scout for AliExpress.
Return a *single* concise product search phrase that is likely to be trending/viral on social media and sells on AliExpress.
Rules:
- 2–6 words max, in English.
- Be specific.
- Avoid brand names and IP.
- Optimize for buyer intent.
- Must NOT equal any excluded phrase."""

NARRATION_FALLBACK = "פרסומת ל-{title}"

POST_TITLE_PREFIX = "🎯"
POST_VIDEO_LABEL = "🎬 וידאו:"
POST_BUY_LABEL = "🛒 קנה עכשיו:"
