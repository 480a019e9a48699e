import pytest
from pydantic import ValidationError

from ali_campaign.config import (
    AffiliateLinkResponse,
    CampaignRequest,
    FindByNameResponse,
    HealthResponse,
    Settings,
)


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("APP_KEY", "key")
    monkeypatch.setenv("APP_SECRET", "secret")
    monkeypatch.delenv("ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("SHIP_TO_COUNTRY", "IL")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.delenv("ALI_API_GATEWAY", raising=False)
    monkeypatch.setenv("VIDEO_DIR", str(tmp_path / "clips"))

    s = Settings.from_env(tmp_path / "missing.env")
    assert s.app_key == "key"
    assert s.ship_to_country == "IL"
    assert s.port == 8080
    assert s.video_dir == tmp_path / "clips"
    assert s.api_gateway == "https://api-sg.aliexpress.com/sync"
    assert s.credential_presence() == {"APP_KEY": True, "APP_SECRET": True, "ACCESS_TOKEN": False}


def test_settings_are_immutable():
    s = Settings()
    with pytest.raises(ValidationError):
        s.app_key = "changed"


def test_find_by_name_response_excludes_none():
    resp = FindByNameResponse(found=0, reason="no_url_anywhere")
    assert resp.model_dump(exclude_none=True) == {"found": 0, "reason": "no_url_anywhere"}


def test_camel_case_aliases():
    req = CampaignRequest.model_validate({"affiliateUrl": "https://a", "productTitle": "Lamp"})
    assert req.affiliate_url == "https://a"
    assert req.image_url_hint is None

    out = AffiliateLinkResponse(link="https://a", via="generate default", is_affiliate=True)
    assert out.model_dump(by_alias=True) == {"link": "https://a", "via": "generate default", "isAffiliate": True}


def test_health_response():
    health = HealthResponse(status="ok")
    assert health.status == "ok"
