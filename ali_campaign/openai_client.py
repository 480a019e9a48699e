from __future__ import annotations

"""
OpenAI client (chat completions + speech) built on the official SDK.

Only the three calls the campaign flow needs are exposed: ad copy from an
image + title, a single viral product idea, and narration audio.
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx
import openai
from loguru import logger

from .config import (
    AD_COPY_TEMPERATURE,
    IDEA_MAX_TOKENS,
    IDEA_TEMPERATURE,
    OPENAI_BASE_URL,
    TTS_RESPONSE_FORMAT,
    Settings,
)
from .constants import (
    AD_COPY_DEFAULT_BRIEF,
    AD_COPY_SYSTEM_PROMPT,
    AD_COPY_TITLE_LABEL,
    IDEA_SYSTEM_PROMPT,
)
from .errors import (
    ConfigurationError,
    UpstreamDecodeError,
    UpstreamHTTPError,
    UpstreamTransportError,
)

SERVICE_NAME = "OpenAI"


def clean_idea(text: str) -> str:
    """First line only, surrounding double quotes removed."""
    first = (text or "").strip().split("\n")[0]
    return first.strip('"').strip()


def build_idea_prompt(exclude: Sequence[str]) -> str:
    listed = "\n".join(f"- {s}" for s in exclude) or "(none)"
    return f"Give one product phrase only. Excluded:\n{listed}"


def _first_message(completion: Any) -> str:
    choices = getattr(completion, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    return (getattr(message, "content", None) or "").strip()


class OpenAIClient:
    """
    Wraps one ``openai.OpenAI`` instance; SDK errors surface as the
    package's upstream errors and are never retried.

    The SDK client is created on first use, after the key check, so a
    missing key never reaches the network. ``http_client`` is handed to the
    SDK as-is (tests pass one with a mock transport).
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self._http = http_client
        self._sdk: Optional[openai.OpenAI] = None

    def close(self) -> None:
        if self._sdk is not None:
            self._sdk.close()
        elif self._http is not None:
            self._http.close()

    def _ensure_key(self) -> None:
        if not self.settings.openai_api_key:
            raise ConfigurationError(
                "Missing OPENAI_API_KEY",
                present={"OPENAI_API_KEY": False},
            )

    @property
    def sdk(self) -> openai.OpenAI:
        self._ensure_key()
        if self._sdk is None:
            self._sdk = openai.OpenAI(
                api_key=self.settings.openai_api_key,
                base_url=OPENAI_BASE_URL,
                timeout=httpx.Timeout(self.settings.http_read_timeout, connect=self.settings.http_connect_timeout),
                max_retries=0,
                http_client=self._http,
            )
        return self._sdk

    def _call(self, fn, **kwargs: Any) -> Any:
        try:
            return fn(**kwargs)
        except openai.APIConnectionError as e:
            raise UpstreamTransportError(SERVICE_NAME, f"request failed: {e}") from e
        except openai.APIStatusError as e:
            raise UpstreamHTTPError(SERVICE_NAME, e.status_code, e.response.text) from e
        except openai.APIError as e:
            raise UpstreamDecodeError(SERVICE_NAME, str(e)) from e

    def chat(self, messages: List[Dict[str, Any]], **options: Any) -> str:
        sdk = self.sdk
        completion = self._call(
            sdk.chat.completions.create,
            model=self.settings.openai_model,
            messages=messages,
            **options,
        )
        return _first_message(completion)

    def create_ad_copy(self, title: str, image_data_url: str, brief: Optional[str] = None) -> str:
        user_text = f"{AD_COPY_TITLE_LABEL}: {title}\n{brief or AD_COPY_DEFAULT_BRIEF}"
        messages = [
            {"role": "system", "content": AD_COPY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_text},
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            },
        ]
        copy = self.chat(messages, temperature=AD_COPY_TEMPERATURE)
        logger.info("Ad copy generated ({} chars) for '{}'", len(copy), title)
        return copy

    def viral_idea(self, exclude: Sequence[str] = ()) -> str:
        messages = [
            {"role": "system", "content": IDEA_SYSTEM_PROMPT},
            {"role": "user", "content": build_idea_prompt(exclude)},
        ]
        raw = self.chat(messages, temperature=IDEA_TEMPERATURE, max_tokens=IDEA_MAX_TOKENS)
        return clean_idea(raw)

    def synthesize_speech(self, text: str) -> bytes:
        sdk = self.sdk
        speech = self._call(
            sdk.audio.speech.create,
            model=self.settings.openai_tts_model,
            voice=self.settings.openai_tts_voice,
            input=text,
            response_format=TTS_RESPONSE_FORMAT,
        )
        audio = speech.content
        if not audio:
            raise UpstreamDecodeError(SERVICE_NAME, "empty speech body")
        logger.info("Narration synthesized ({} bytes)", len(audio))
        return audio
