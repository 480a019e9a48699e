# ali_campaign/_singletons.py
from functools import lru_cache
from typing import Iterator

from fastapi import Depends

from .aliexpress import AliExpressClient
from .campaign import CampaignComposer
from .config import Settings
from .media import VideoEncoder
from .openai_client import OpenAIClient
from .page_fetch import PageFetcher


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


# Per-request clients; the generator form closes their connection pools
# once the response has been sent.

def get_ali_client(settings: Settings = Depends(get_settings)) -> Iterator[AliExpressClient]:
    client = AliExpressClient(settings)
    try:
        yield client
    finally:
        client.close()


def get_openai_client(settings: Settings = Depends(get_settings)) -> Iterator[OpenAIClient]:
    client = OpenAIClient(settings)
    try:
        yield client
    finally:
        client.close()


def get_campaign_composer(settings: Settings = Depends(get_settings)) -> Iterator[CampaignComposer]:
    composer = CampaignComposer(
        fetcher=PageFetcher(settings),
        ai=OpenAIClient(settings),
        encoder=VideoEncoder(settings),
    )
    try:
        yield composer
    finally:
        composer.close()
