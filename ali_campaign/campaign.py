"""
One-shot campaign builder.

image url -> image bytes -> ad copy -> narration -> video -> post text.
Steps run strictly in sequence and any failure aborts the whole campaign;
there is no partial result.
"""

from __future__ import annotations

import base64
from typing import Optional

from loguru import logger

from .config import IMAGE_PREVIEW_CHARS
from .constants import (
    NARRATION_FALLBACK,
    POST_BUY_LABEL,
    POST_TITLE_PREFIX,
    POST_VIDEO_LABEL,
)
from .image_probe import find_main_image
from .media import VideoEncoder
from .openai_client import OpenAIClient
from .page_fetch import PageFetcher
from .pipeline_types import CampaignArtifact


def to_data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def compose_social_post(
    title: str,
    ad_copy: str,
    video_url: Optional[str] = None,
    affiliate_url: Optional[str] = None,
) -> str:
    # one part per line; missing parts leave no gap
    lines = [
        f"{POST_TITLE_PREFIX} {title}",
        ad_copy,
        f"{POST_VIDEO_LABEL} {video_url}" if video_url else "",
        f"{POST_BUY_LABEL} {affiliate_url}" if affiliate_url else "",
    ]
    return "\n".join(line for line in lines if line)


class CampaignComposer:
    def __init__(self, fetcher: PageFetcher, ai: OpenAIClient, encoder: VideoEncoder):
        self.fetcher = fetcher
        self.ai = ai
        self.encoder = encoder

    def close(self) -> None:
        self.fetcher.close()
        self.ai.close()

    def resolve_image_url(self, product_url: str, image_url_hint: Optional[str] = None) -> str:
        if image_url_hint:
            return image_url_hint
        return find_main_image(self.fetcher.fetch_html(product_url))

    def narrate_and_encode(self, image: bytes, content_type: str, title: str, ad_copy: str) -> str:
        narration = ad_copy or NARRATION_FALLBACK.format(title=title)
        audio_path = self.encoder.stage_audio(self.ai.synthesize_speech(narration))
        return self.encoder.encode(image, audio_path, content_type)

    def build(
        self,
        affiliate_url: str,
        title: str,
        image_url_hint: Optional[str] = None,
        brief: Optional[str] = None,
    ) -> CampaignArtifact:
        image_url = self.resolve_image_url(affiliate_url, image_url_hint)
        logger.info("Campaign image for '{}': {}", title, image_url)

        image, content_type = self.fetcher.download_image(image_url)
        data_url = to_data_url(image, content_type)

        ad_copy = self.ai.create_ad_copy(title, data_url, brief)
        video_url = self.narrate_and_encode(image, content_type, title, ad_copy)

        return CampaignArtifact(
            ad_copy=ad_copy,
            video_url=video_url,
            social_post=compose_social_post(title, ad_copy, video_url, affiliate_url),
            image_url=image_url,
            image_content_type=content_type,
            image_preview=data_url[:IMAGE_PREVIEW_CHARS] + "...",
        )
