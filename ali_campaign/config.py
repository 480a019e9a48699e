from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

PUBLIC_DIR = PROJECT_ROOT / "public"
VIDEO_DIR = PUBLIC_DIR / "videos"
TMP_DIR = PROJECT_ROOT / ".tmp"

VIDEO_URL_PREFIX = "/videos"


# ---------------------------
# Upstream affiliate API
# ---------------------------

DEFAULT_ALI_API_GATEWAY = "https://api-sg.aliexpress.com/sync"
ALI_SIGN_METHOD = "hmac-sha256"
ALI_API_VERSION = "2.0"
ALI_SIMPLIFY = "true"

METHOD_PRODUCT_QUERY = "aliexpress.affiliate.product.query"
METHOD_LINK_GENERATE = "aliexpress.affiliate.link.generate"

SEARCH_PAGE_SIZE = 50
DEBUG_PAGE_SIZE = 5
DEBUG_DEFAULT_KEYWORDS = "laptop stand"
SEARCH_FIELDS = "product_id,product_title,product_detail_url,promotion_link"

DEFAULT_TRACKING_ID = "default"
PROMOTION_LINK_TYPE = "0"
LINK_VIA = "generate default"


# ---------------------------
# Relevance scoring (tuning, not contract)
# ---------------------------

SUBSTRING_WEIGHT = 4.0
OVERLAP_WEIGHT = 3.0
OVERLAP_TOKEN_CAP = 6

TOKEN_MATCH_CONFIDENCE = 0.8
ANY_URL_CONFIDENCE = 0.5

SCORE_DECIMALS = 2


# ---------------------------
# Generative AI
# ---------------------------

OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_TTS_MODEL = "gpt-4o-mini-tts"
DEFAULT_OPENAI_TTS_VOICE = "alloy"

AD_COPY_TEMPERATURE = 0.9
IDEA_TEMPERATURE = 1.0
IDEA_MAX_TOKENS = 50
TTS_RESPONSE_FORMAT = "mp3"


# ---------------------------
# Media
# ---------------------------

DEFAULT_FFMPEG_BINARY = "ffmpeg"
VIDEO_WIDTH = 1080
VIDEO_HEIGHT = 1920
VIDEO_FPS = 30
AUDIO_BITRATE = "192k"

IMAGE_PREVIEW_CHARS = 128


# ---------------------------
# HTTP hardening
# ---------------------------

DEFAULT_HTTP_CONNECT_TIMEOUT = 5.0
DEFAULT_HTTP_READ_TIMEOUT = 60.0
PAGE_MAX_BYTES = 5_000_000
IMAGE_MAX_BYTES = 15_000_000

BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept-Language": "en-US,en;q=0.9",
}


# ---------------------------
# Runtime settings
# ---------------------------

class Settings(BaseModel):
    """
    Immutable runtime configuration.

    Built once from the environment and handed to every client / composer
    constructor; nothing else in the package reads os.environ.
    """

    model_config = ConfigDict(frozen=True)

    app_key: str = ""
    app_secret: str = ""
    access_token: str = ""
    api_gateway: str = DEFAULT_ALI_API_GATEWAY
    tracking_id: str = DEFAULT_TRACKING_ID

    target_language: str = "en"
    target_currency: str = "USD"
    ship_to_country: str = "US"

    openai_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_tts_model: str = DEFAULT_OPENAI_TTS_MODEL
    openai_tts_voice: str = DEFAULT_OPENAI_TTS_VOICE

    ffmpeg_binary: str = DEFAULT_FFMPEG_BINARY
    video_dir: Path = VIDEO_DIR
    tmp_dir: Path = TMP_DIR
    public_base_url: str = ""

    http_connect_timeout: float = Field(default=DEFAULT_HTTP_CONNECT_TIMEOUT, gt=0)
    http_read_timeout: float = Field(default=DEFAULT_HTTP_READ_TIMEOUT, gt=0)

    port: int = 4000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        load_dotenv(env_file)
        env = os.environ
        return cls(
            app_key=env.get("APP_KEY", ""),
            app_secret=env.get("APP_SECRET", ""),
            access_token=env.get("ACCESS_TOKEN", ""),
            api_gateway=env.get("ALI_API_GATEWAY") or DEFAULT_ALI_API_GATEWAY,
            tracking_id=env.get("TRACKING_ID") or DEFAULT_TRACKING_ID,
            target_language=env.get("TARGET_LANGUAGE") or "en",
            target_currency=env.get("TARGET_CURRENCY") or "USD",
            ship_to_country=env.get("SHIP_TO_COUNTRY") or "US",
            openai_api_key=env.get("OPENAI_API_KEY", ""),
            openai_model=env.get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            openai_tts_model=env.get("OPENAI_TTS_MODEL") or DEFAULT_OPENAI_TTS_MODEL,
            openai_tts_voice=env.get("OPENAI_TTS_VOICE") or DEFAULT_OPENAI_TTS_VOICE,
            ffmpeg_binary=env.get("FFMPEG_BINARY") or DEFAULT_FFMPEG_BINARY,
            video_dir=Path(env.get("VIDEO_DIR") or VIDEO_DIR),
            public_base_url=env.get("PUBLIC_BASE_URL", ""),
            http_connect_timeout=float(env.get("HTTP_CONNECT_TIMEOUT", DEFAULT_HTTP_CONNECT_TIMEOUT)),
            http_read_timeout=float(env.get("HTTP_READ_TIMEOUT", DEFAULT_HTTP_READ_TIMEOUT)),
            port=int(env.get("PORT", "4000")),
            log_level=env.get("LOG_LEVEL") or "INFO",
        )

    def credential_presence(self) -> Dict[str, bool]:
        """Which affiliate credentials are set; never the values themselves."""
        return {
            "APP_KEY": bool(self.app_key),
            "APP_SECRET": bool(self.app_secret),
            "ACCESS_TOKEN": bool(self.access_token),
        }


# ---------------------------
# Logging / observability
# ---------------------------

def configure_logging(level: str = "INFO") -> None:
    """Single console sink; nothing is written to disk."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FindByNameRequest(BaseModel):
    keyword: str = Field(..., min_length=1)


class FindByNameResponse(BaseModel):
    """
    Response body for POST /api/find-by-name.
    ``found`` is 0/1; ``reason`` is only set when nothing was found.
    """

    found: int
    url: Optional[str] = None
    title: Optional[str] = None
    score: Optional[float] = None
    reason: Optional[str] = None


class AliDebugRequest(BaseModel):
    keywords: Optional[str] = None


class AffiliateLinkRequest(CamelModel):
    product_url: str = Field(..., min_length=1)


class AffiliateLinkResponse(CamelModel):
    link: str
    via: str
    is_affiliate: bool


class CampaignRequest(CamelModel):
    affiliate_url: str = Field(..., min_length=1)
    product_title: str = Field(..., min_length=1)
    image_url_hint: Optional[str] = None
    brief: Optional[str] = None


class CampaignInputs(CamelModel):
    affiliate_url: str
    product_title: str
    brief: Optional[str] = None
    image_url_detected: str


class CampaignAssets(CamelModel):
    image_data_url_content_type: str
    image_data_url_preview: str


class VideoInfo(CamelModel):
    video_url: str


class CampaignResponse(CamelModel):
    ok: bool = True
    inputs: CampaignInputs
    assets: CampaignAssets
    ad_copy: str
    video: VideoInfo
    social_post: str


class ViralIdeaRequest(BaseModel):
    exclude: List[str] = Field(default_factory=list)


class ViralIdeaResponse(BaseModel):
    idea: str


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
