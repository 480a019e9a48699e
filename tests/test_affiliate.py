import httpx
import pytest
from urllib.parse import parse_qs

from ali_campaign.affiliate import (
    collect_affiliate_links,
    generate_affiliate_link,
    link_set_from_response,
    pick_best_link,
)
from ali_campaign.aliexpress import AliExpressClient
from ali_campaign.config import Settings
from ali_campaign.errors import LinkNotFoundError
from ali_campaign.utils.urls import ensure_scheme, normalize_item_url

SETTINGS = Settings(app_key="k", app_secret="s", tracking_id="my_tracker", ship_to_country="IL")


def test_normalize_item_url_canonicalizes_locale_hosts():
    u = "https://he.aliexpress.com/item/1005006789.html?spm=a2g0o.home&gps-id=x"
    assert normalize_item_url(u) == "https://www.aliexpress.com/item/1005006789.html"
    assert normalize_item_url("https://aliexpress.us/ITEM/42.HTML") == "https://www.aliexpress.com/item/42.html"


def test_normalize_item_url_passthrough():
    for u in [
        "https://s.click.aliexpress.com/e/_abc",
        "https://www.amazon.com/item/123.html",
        "https://notaliexpress.com/item/1.html",
        "not a url at all",
        "",
    ]:
        assert normalize_item_url(u) == u


def test_ensure_scheme():
    assert ensure_scheme("//ae01.alicdn.com/x.jpg") == "https://ae01.alicdn.com/x.jpg"
    assert ensure_scheme("https://a/b.jpg") == "https://a/b.jpg"


def test_nested_tracking_link_wins_over_plain_links():
    resp = {
        "aliexpress_affiliate_link_generate_response": {
            "resp_result": {
                "result": {
                    "promotion_link": "https://www.aliexpress.com/item/1.html",
                    "products": [{"promotion_link": "https://s.click.aliexpress.com/x"}],
                }
            }
        }
    }
    link_set = link_set_from_response(resp)
    assert link_set.best == "https://s.click.aliexpress.com/x"
    assert link_set.is_affiliate
    assert "https://www.aliexpress.com/item/1.html" in link_set.links


def test_links_under_result_products():
    resp = {"result": {"products": [{"promotion_link": "https://s.click.aliexpress.com/x"}]}}
    assert pick_best_link(collect_affiliate_links(resp)) == "https://s.click.aliexpress.com/x"


def test_collect_dedupes_and_walks_all_link_fields():
    resp = {
        "promotion_short_link": "https://a",
        "promotion_links": {"promotion_link": [{"promotionUrl": "https://b"}]},
        "promotion_link_list": [{"promotion_link": "https://a"}, {"promotion_link": "https://c"}],
        "product_list": {"product": [{"promotion_link": "https://d"}]},
        "deep": [[{"x": {"promotion_link": "https://e"}}]],
        "not_a_link": {"promotion_link": 123},
    }
    assert collect_affiliate_links(resp) == [
        "https://a",
        "https://c",
        "https://d",
        "https://b",
        "https://e",
    ]


def test_collect_on_scalars_and_empty():
    assert collect_affiliate_links(None) == []
    assert collect_affiliate_links("https://s.click.aliexpress.com/x") == []
    assert collect_affiliate_links({}) == []


def test_pick_best_falls_back_to_first():
    assert pick_best_link(["https://x", "https://y"]) == "https://x"
    assert pick_best_link([]) is None


def _client(handler):
    return AliExpressClient(SETTINGS, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_generate_affiliate_link_sends_normalized_url():
    seen = {}

    def handler(request):
        seen["form"] = parse_qs(request.content.decode())
        body = {"resp_result": {"result": {"promotion_links": [{"promotion_link": "https://s.click.aliexpress.com/e/_q"}]}}}
        return httpx.Response(200, json=body)

    link_set = generate_affiliate_link(_client(handler), "https://he.aliexpress.com/item/77.html?spm=1")
    assert link_set.best == "https://s.click.aliexpress.com/e/_q"
    assert seen["form"]["source_values"] == ["https://www.aliexpress.com/item/77.html"]
    assert seen["form"]["tracking_id"] == ["my_tracker"]
    assert seen["form"]["promotion_link_type"] == ["0"]
    assert seen["form"]["ship_to_country"] == ["IL"]
    assert seen["form"]["method"] == ["aliexpress.affiliate.link.generate"]


def test_generate_affiliate_link_not_found():
    client = _client(lambda r: httpx.Response(200, json={"resp_result": {"result": {}}}))
    with pytest.raises(LinkNotFoundError):
        generate_affiliate_link(client, "https://www.aliexpress.com/item/1.html")
