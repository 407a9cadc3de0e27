"""CLI entry point for sending rate-limited requests.

Usage:
    # Single request, prints status and pretty-printed body:
    python -m webrequest.client.main GET https api.example.com /users/{id} \
        --path-param id=42 --query expand=groups --user me --password secret

    # Drain an offset-paginated endpoint:
    python -m webrequest.client.main GET https jira.example.com /rest/api/2/search \
        --paginate offset --start-at-param startAt --items-field issues

    # Drain a cursor-paginated endpoint:
    python -m webrequest.client.main GET https api.example.com /v1/events \
        --paginate cursor --items-field results --cursor-field nextPageCursor
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from ..common.config import settings
from ..common.logging import setup_logging
from .invoker import RequestInvoker
from .models import (
    CURSOR_PARAMETER,
    Body,
    Cookie,
    JsonBody,
    RequestCoordinates,
    TextBody,
    cursor_page_for,
    offset_page_for,
)
from .pagination import fetch_objects_with_cursor, fetch_objects_with_start_at
from .rate_limiter import set_rate

logger = logging.getLogger(__name__)


def _parse_pairs(pairs: Sequence[str] | None, option: str) -> dict[str, list[str]]:
    """Parse repeated ``key=value`` options, keeping every value per key."""
    parsed: dict[str, list[str]] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"{option} expects key=value, got {pair!r}")
        parsed.setdefault(key, []).append(value)
    return parsed


def _single_values(pairs: dict[str, list[str]]) -> dict[str, Any]:
    return {k: v[0] if len(v) == 1 else v for k, v in pairs.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send a rate-limited HTTP request")
    parser.add_argument("method", help="GET, HEAD, OPTIONS, DELETE, POST or PUT")
    parser.add_argument("scheme", help="http or https")
    parser.add_argument("host", help="Host, optionally with :port")
    parser.add_argument("path", help="Path template, may contain {name} placeholders")
    parser.add_argument("--path-param", action="append", metavar="KEY=VALUE")
    parser.add_argument("--query", action="append", metavar="KEY=VALUE")
    parser.add_argument("--header", action="append", metavar="KEY=VALUE")
    parser.add_argument("--cookie", action="append", metavar="KEY=VALUE")
    parser.add_argument("--user", default=None)
    parser.add_argument("--password", default=None)

    body = parser.add_mutually_exclusive_group()
    body.add_argument("--text-body", default=None, help="Send as text/plain")
    body.add_argument("--json-body", default=None, help="JSON document to send")

    parser.add_argument("--rate", type=int, default=None, help="Admissions per period")
    parser.add_argument("--period-ms", type=int, default=None, help="Rate window in ms")

    parser.add_argument("--paginate", choices=["offset", "cursor"], default=None)
    parser.add_argument("--start-at-param", default="startAt")
    parser.add_argument("--items-field", default="values")
    parser.add_argument("--cursor-field", default="nextPageCursor")
    parser.add_argument("--cursor-param", default=CURSOR_PARAMETER)
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def build_request(args: argparse.Namespace) -> tuple[RequestCoordinates, Body | None]:
    """Turn parsed CLI arguments into request coordinates and a body."""
    path_params = _single_values(_parse_pairs(args.path_param, "--path-param"))
    cookies = [
        Cookie(name, value)
        for name, values in _parse_pairs(args.cookie, "--cookie").items()
        for value in values
    ]
    request = RequestCoordinates(
        scheme=args.scheme,
        host=args.host,
        path=args.path,
        method=args.method,
        path_parameters=path_params,
        username=args.user,
        password=args.password,
        headers=_parse_pairs(args.header, "--header"),
        cookies=cookies,
        query_parameters=_single_values(_parse_pairs(args.query, "--query")),
    )

    body: Body | None = None
    if args.text_body is not None:
        body = TextBody(args.text_body)
    elif args.json_body is not None:
        body = JsonBody(json.loads(args.json_body))
    return request, body


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.rate is not None or args.period_ms is not None:
        set_rate(
            args.rate if args.rate is not None else settings.rate_limit.rate,
            args.period_ms if args.period_ms is not None else settings.rate_limit.period_ms,
        )

    try:
        request, body = build_request(args)
    except (argparse.ArgumentTypeError, json.JSONDecodeError) as exc:
        parser.error(str(exc))

    with RequestInvoker() as invoker:
        if args.paginate == "offset":
            items = fetch_objects_with_start_at(
                invoker,
                request,
                args.start_at_param,
                offset_page_for(args.items_field),
                body,
            )
        elif args.paginate == "cursor":
            items = fetch_objects_with_cursor(
                invoker,
                request,
                cursor_page_for(args.items_field, args.cursor_field),
                body,
                cursor_parameter=args.cursor_param,
            )
        else:
            resp = invoker.invoke(request, body)
            logger.info("%s %s -> %d", resp.request.method, resp.url, resp.status_code)
            try:
                print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
            except ValueError:
                print(resp.text)
            return 0 if resp.ok else 1

    logger.info("Fetched %d items", len(items))
    print(json.dumps(items, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
