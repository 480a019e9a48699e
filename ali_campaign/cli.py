from __future__ import annotations

"""
Command-line entry point.

    ali-campaign serve [--host 0.0.0.0] [--port 4000]
    ali-campaign find "wireless earbuds"
    ali-campaign link https://www.aliexpress.com/item/1005001.html
    ali-campaign idea --exclude "phone holder" "led strip"
"""

import argparse
import json
import sys
from dataclasses import asdict
from typing import List, Optional

from loguru import logger

from .affiliate import generate_affiliate_link
from .aliexpress import AliExpressClient
from .config import Settings, configure_logging
from .errors import InvalidRequestError, ServiceError
from .openai_client import OpenAIClient
from .search import find_by_name


def _print(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    uvicorn.run("ali_campaign.api:app", host=args.host, port=args.port or settings.port)


def _cmd_find(args: argparse.Namespace, settings: Settings) -> None:
    keyword = args.keyword.strip()
    if not keyword:
        raise InvalidRequestError("Missing keyword")

    client = AliExpressClient(settings)
    try:
        outcome = find_by_name(client, keyword)
    finally:
        client.close()
    _print(asdict(outcome))


def _cmd_link(args: argparse.Namespace, settings: Settings) -> None:
    client = AliExpressClient(settings)
    try:
        link_set = generate_affiliate_link(client, args.product_url)
    finally:
        client.close()
    _print(asdict(link_set))


def _cmd_idea(args: argparse.Namespace, settings: Settings) -> None:
    ai = OpenAIClient(settings)
    try:
        _print({"idea": ai.viral_idea(args.exclude)})
    finally:
        ai.close()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ali-campaign")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=None, help="Defaults to PORT / 4000")
    p.set_defaults(func=_cmd_serve)

    p = sub.add_parser("find", help="Search a product by keyword")
    p.add_argument("keyword")
    p.set_defaults(func=_cmd_find)

    p = sub.add_parser("link", help="Generate an affiliate link for a product url")
    p.add_argument("product_url")
    p.set_defaults(func=_cmd_link)

    p = sub.add_parser("idea", help="Ask for one viral product phrase")
    p.add_argument("--exclude", nargs="*", default=[])
    p.set_defaults(func=_cmd_idea)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    try:
        args.func(args, settings)
    except ServiceError as e:
        logger.error("{}", e)
        _print(e.payload())
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
