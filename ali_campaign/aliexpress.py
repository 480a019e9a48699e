from __future__ import annotations

"""
Signed client for the AliExpress Open Platform gateway.

Every call is a form-encoded POST signed with HMAC-SHA256 over the sorted
``key + value`` concatenation of all parameters. The gateway verifies the
signature bit-for-bit, so parameter serialisation here has to match what
the upstream verifier rebuilds.
"""

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx
from loguru import logger

from .config import (
    ALI_API_VERSION,
    ALI_SIGN_METHOD,
    ALI_SIMPLIFY,
    Settings,
)
from .errors import (
    ConfigurationError,
    UpstreamAPIError,
    UpstreamDecodeError,
    UpstreamHTTPError,
    UpstreamTransportError,
)

SERVICE_NAME = "AliExpress"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"


@dataclass
class SignedRequest:
    url: str
    params: Dict[str, str]


def _serialize_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def serialize_biz_params(biz_params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Drop ``None`` values and stringify the rest."""
    out: Dict[str, str] = {}
    for key, value in (biz_params or {}).items():
        if value is None:
            continue
        out[key] = _serialize_value(value)
    return out


def sign(params: Mapping[str, str], secret: str) -> str:
    payload = "".join(f"{k}{params[k]}" for k in sorted(params))
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest().upper()


def method_url(gateway: str, method: str) -> str:
    return f"{gateway.rstrip('/')}/{method.replace('.', '/')}"


def ensure_credentials(settings: Settings) -> None:
    if not settings.app_key or not settings.app_secret:
        raise ConfigurationError(
            "Missing APP_KEY/APP_SECRET env vars",
            present=settings.credential_presence(),
        )


def build_signed_request(
    settings: Settings,
    method: str,
    biz_params: Optional[Mapping[str, Any]] = None,
    timestamp_ms: Optional[int] = None,
) -> SignedRequest:
    """
    Merge public + business parameters and attach the signature.

    ``timestamp_ms`` defaults to the current wall clock; pass it explicitly
    to get a reproducible signature.
    """
    ensure_credentials(settings)

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    params: Dict[str, str] = {
        "app_key": settings.app_key,
        "method": method,
        "sign_method": ALI_SIGN_METHOD,
        "timestamp": str(timestamp_ms),
        "v": ALI_API_VERSION,
        "simplify": ALI_SIMPLIFY,
    }
    if settings.access_token:
        params["access_token"] = settings.access_token

    params.update(serialize_biz_params(biz_params))
    params["sign"] = sign(params, settings.app_secret)
    return SignedRequest(url=method_url(settings.api_gateway, method), params=params)


def _raise_for_error_envelope(data: Any) -> None:
    if not isinstance(data, dict):
        return
    envelope = data.get("error_response")
    if not isinstance(envelope, dict):
        return
    code = envelope.get("code")
    msg = envelope.get("msg")
    if code or msg:
        raise UpstreamAPIError(SERVICE_NAME, code, msg)


class AliExpressClient:
    """
    Thin wrapper around one ``httpx.Client``.

    Pass ``http_client`` to share a connection pool or to inject a mock
    transport; otherwise a client with the configured timeouts is created.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.settings = settings
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(settings.http_read_timeout, connect=settings.http_connect_timeout),
        )

    def close(self) -> None:
        self._http.close()

    def call(self, method: str, biz_params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        req = build_signed_request(self.settings, method, biz_params)
        logger.debug("AliExpress call {} -> {}", method, req.url)

        try:
            r = self._http.post(
                req.url,
                data=req.params,
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        except httpx.HTTPError as e:
            raise UpstreamTransportError(SERVICE_NAME, f"request failed: {e}") from e

        if r.status_code < 200 or r.status_code >= 300:
            raise UpstreamHTTPError(SERVICE_NAME, r.status_code, r.text)

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamDecodeError(SERVICE_NAME, r.text) from e

        _raise_for_error_envelope(data)
        return data
