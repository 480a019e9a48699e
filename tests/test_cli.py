import json

import pytest

from ali_campaign import cli
from ali_campaign.errors import LinkNotFoundError
from ali_campaign.pipeline_types import ProductCandidate, SearchOutcome


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_parser_idea_exclusions():
    args = cli.build_parser().parse_args(["idea", "--exclude", "a", "b"])
    assert args.exclude == ["a", "b"]


def test_find_prints_outcome(monkeypatch, capsys):
    def fake_find(client, keyword):
        return SearchOutcome(
            found=True,
            candidate=ProductCandidate(id="1", title=keyword.title(), url="https://x/1"),
            score=4.5,
            tier=1,
        )

    monkeypatch.setattr(cli, "find_by_name", fake_find)
    assert cli.main(["find", "desk lamp"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["found"] is True
    assert out["candidate"]["title"] == "Desk Lamp"


def test_service_error_exits_nonzero(monkeypatch, capsys):
    def fake_link(client, product_url):
        raise LinkNotFoundError("Affiliate link not found in API response")

    monkeypatch.setattr(cli, "generate_affiliate_link", fake_link)
    assert cli.main(["link", "https://www.aliexpress.com/item/1.html"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["error"] == "affiliate_link_not_found"


def test_find_blank_keyword_makes_no_upstream_call(monkeypatch, capsys):
    def no_client(settings):
        raise AssertionError("upstream client must not be created")

    monkeypatch.setattr(cli, "AliExpressClient", no_client)
    assert cli.main(["find", "   "]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["error"] == "invalid_request"
