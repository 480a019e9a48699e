from ali_campaign.extract import (
    canonicalize,
    canonicalize_all,
    extract_products,
    response_root,
)


def test_extract_from_query_envelope_with_product_wrapper():
    resp = {
        "aliexpress_affiliate_product_query_response": {
            "resp_result": {
                "result": {
                    "products": {"product": [{"product_id": 1}, {"product_id": 2}]}
                }
            }
        }
    }
    assert [p["product_id"] for p in extract_products(resp)] == [1, 2]


def test_extract_from_simplified_root_with_direct_array():
    resp = {"resp_result": {"result": {"products": [{"title": "A"}]}}}
    assert extract_products(resp) == [{"title": "A"}]


def test_extract_from_search_envelope_generic_keys():
    resp = {
        "aliexpress_affiliate_product_search_response": {
            "resp_result": {"result": {"result_list": [{"item_id": "9"}]}}
        }
    }
    assert extract_products(resp) == [{"item_id": "9"}]


def test_extract_skips_empty_products_for_items():
    resp = {"resp_result": {"result": {"products": [], "items": [{"id": 3}]}}}
    assert extract_products(resp) == [{"id": 3}]


def test_first_root_wins_over_later_envelopes():
    resp = {
        "resp_result": {"result": {"items": [{"id": "simplified"}]}},
        "aliexpress_affiliate_product_query_response": {
            "resp_result": {"result": {"items": [{"id": "enveloped"}]}}
        },
    }
    assert extract_products(resp) == [{"id": "simplified"}]


def test_extract_never_raises_on_junk():
    for junk in [None, [], "text", 42, {"resp_result": "x"}, {"resp_result": {"result": []}}]:
        assert extract_products(junk) == []
    assert response_root({"error_response": {}}) is None


def test_canonicalize_probes_alternative_field_names():
    c = canonicalize(
        {
            "item_id": 1005001,
            "title": "  USB <b>Cable</b> ",
            "product_detail_url": "https://www.aliexpress.com/item/1005001.html",
            "promotion_link": "",
        }
    )
    assert c.id == "1005001"
    assert c.title == "USB Cable"
    # empty promotion_link falls through to the next field
    assert c.url == "https://www.aliexpress.com/item/1005001.html"


def test_canonicalize_keeps_angle_bracketed_title_text():
    c = canonicalize({"product_title": "Adapter <USB-C> to HDMI", "url": "https://a"})
    assert c.title == "Adapter <USB-C> to HDMI"
    assert c.url == "https://a"


def test_canonicalize_prefers_promotion_link():
    c = canonicalize(
        {
            "product_id": "7",
            "product_title": "Lamp",
            "promotion_link": "https://s.click.aliexpress.com/e/_x",
            "product_detail_url": "https://www.aliexpress.com/item/7.html",
        }
    )
    assert c.url == "https://s.click.aliexpress.com/e/_x"


def test_canonicalize_missing_fields():
    c = canonicalize({"foo": "bar"})
    assert c.id is None
    assert c.title == ""
    assert c.url is None

    assert canonicalize("not a record").url is None


def test_canonicalize_all_keeps_order():
    out = canonicalize_all([{"title": "b"}, {"title": "a"}])
    assert [c.title for c in out] == ["b", "a"]
