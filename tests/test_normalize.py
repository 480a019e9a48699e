from ali_campaign.normalize import (
    basic_clean,
    meaningful_tokens,
    normalize_text,
    tokenize,
)


def test_basic_clean_strips_markup_and_whitespace():
    raw = "  <font>Wireless</font>   Earbuds\n Pro "
    assert basic_clean(raw) == "Wireless Earbuds Pro"


def test_basic_clean_handles_none_and_numbers():
    assert basic_clean(None) == ""
    assert basic_clean(42) == "42"


def test_basic_clean_keeps_angle_bracketed_product_text():
    assert basic_clean("Adapter <USB-C> to HDMI") == "Adapter <USB-C> to HDMI"
    assert basic_clean("Cable <b>USB</b>-C<br/>2m <Type C>") == "Cable USB-C 2m <Type C>"


def test_normalize_text_lowercases_and_strips_punctuation():
    assert normalize_text("  Wireless-Earbuds, PRO!! (2024) ") == "wireless earbuds pro 2024"


def test_normalize_text_keeps_hebrew_letters():
    assert normalize_text("אוזניות, אלחוטיות!") == "אוזניות אלחוטיות"


def test_normalize_text_underscore_is_a_separator():
    assert normalize_text("usb_c cable") == "usb c cable"


def test_normalize_text_is_idempotent():
    samples = [
        "Wireless Earbuds Pro",
        "ℌello Ⅻ ﬁne ²",
        "İstanbul café — “quoted”",
        "אוזניות   אלחוטיות!!",
        "",
        "___",
    ]
    for s in samples:
        once = normalize_text(s)
        assert normalize_text(once) == once


def test_tokenize_empty():
    assert tokenize("") == []
    assert tokenize("!!!") == []


def test_meaningful_tokens_drops_bilingual_stop_words():
    assert meaningful_tokens("Case for the phone") == ["case", "phone"]
    assert meaningful_tokens("כיסוי של טלפון") == ["כיסוי", "טלפון"]
