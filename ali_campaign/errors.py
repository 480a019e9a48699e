from __future__ import annotations

"""
Exception taxonomy.

Every failure a request can hit derives from :class:`ServiceError`, which
carries the HTTP status and error label the API layer renders. Nothing here
is retried; a request either fully succeeds or fails with one of these.
"""

from typing import Dict, Optional


class ServiceError(Exception):
    status_code: int = 500
    error: str = "internal_error"

    def payload(self) -> Dict[str, object]:
        return {"error": self.error, "detail": str(self)}


class InvalidRequestError(ServiceError):
    status_code = 400
    error = "invalid_request"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(ServiceError):
    """Required settings are missing; raised before any network call."""

    error = "configuration_error"

    def __init__(self, message: str, present: Optional[Dict[str, bool]] = None):
        super().__init__(message)
        self.present = dict(present or {})

    def payload(self) -> Dict[str, object]:
        out = super().payload()
        out["present"] = self.present
        return out


# ---------------------------------------------------------------------------
# Upstream APIs (affiliate gateway, generative AI)
# ---------------------------------------------------------------------------

class UpstreamError(ServiceError):
    status_code = 502
    error = "upstream_failed"

    def __init__(self, service: str, message: str):
        super().__init__(f"{service} {message}")
        self.service = service


class UpstreamTransportError(UpstreamError):
    """Network-level failure (DNS, connect, read)."""


class UpstreamHTTPError(UpstreamError):
    def __init__(self, service: str, status: int, body: str = ""):
        super().__init__(service, f"HTTP {status}: {body}")
        self.status = status
        self.body = body


class UpstreamDecodeError(UpstreamError):
    def __init__(self, service: str, body: str = ""):
        super().__init__(service, f"non-JSON: {body}")
        self.body = body


class UpstreamAPIError(UpstreamError):
    """Well-formed JSON carrying an ``error_response`` envelope."""

    def __init__(self, service: str, code: object = None, msg: object = None):
        super().__init__(service, f"API error: {code} {msg}")
        self.code = code
        self.msg = msg


# ---------------------------------------------------------------------------
# Not-found outcomes that abort the request
# ---------------------------------------------------------------------------

class LinkNotFoundError(ServiceError):
    status_code = 502
    error = "affiliate_link_not_found"


class IdeaNotFoundError(ServiceError):
    status_code = 502
    error = "idea_not_found"


# ---------------------------------------------------------------------------
# Media pipeline
# ---------------------------------------------------------------------------

class MediaError(ServiceError):
    error = "media_pipeline_failed"


class PageFetchError(MediaError):
    pass


class ImageNotFoundError(MediaError):
    pass


class ImageFetchError(MediaError):
    pass


class EncoderError(MediaError):
    pass
