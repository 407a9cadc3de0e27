"""Drain paginated endpoints into a single list.

Two strategies are supported:
- offset: a numeric start parameter advanced by the size of each page,
  stopping on the first empty page
- cursor: the server-issued continuation token echoed back on the next
  call, stopping when no token is returned

A non-success page never advances the position. It is retried in place up
to ``max_page_retries`` consecutive times, then treated as empty, which
ends the drain with whatever was collected so far.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import requests

from .invoker import RequestInvoker
from .models import (
    CURSOR_PARAMETER,
    Body,
    CursorPage,
    OffsetPage,
    RequestCoordinates,
    is_success,
)

logger = logging.getLogger(__name__)

PageT = TypeVar("PageT", OffsetPage, CursorPage)


def decode_page(response: requests.Response, page_type: type[PageT]) -> PageT:
    """Decode a JSON response body into ``page_type``."""
    return page_type.model_validate(response.json())


def _retry_budget(invoker: RequestInvoker, max_page_retries: int | None) -> int:
    if max_page_retries is None:
        return invoker.settings.max_page_retries
    return max_page_retries


def fetch_objects_with_start_at(
    invoker: RequestInvoker,
    request: RequestCoordinates,
    start_at_parameter: str,
    page_type: type[OffsetPage],
    body: Body | None = None,
    max_page_retries: int | None = None,
) -> list[Any]:
    """Fetch every item from an offset-paginated endpoint.

    Args:
        invoker: Invoker used for each page request.
        request: Coordinates of the first page; not modified.
        start_at_parameter: Name of the query parameter carrying the offset.
        page_type: OffsetPage subclass describing one page.
        body: Optional body sent with every page request.
        max_page_retries: Consecutive failed pages retried before stopping.
            Defaults to the invoker's setting.

    Returns:
        All items, in page order.
    """
    retries = _retry_budget(invoker, max_page_retries)
    result: list[Any] = []
    start_at = 0
    failures = 0

    while True:
        resp = invoker.invoke(request.with_query(start_at_parameter, start_at), body)
        if not is_success(resp.status_code):
            logger.error("Error fetching objects: %s", resp.status_code)
            failures += 1
            if failures > retries:
                break
            continue

        failures = 0
        items = decode_page(resp, page_type).paged_items
        if not items:
            break
        result.extend(items)
        start_at += len(items)

    logger.debug("Fetched %d objects by %s", len(result), start_at_parameter)
    return result


def fetch_objects_with_cursor(
    invoker: RequestInvoker,
    request: RequestCoordinates,
    page_type: type[CursorPage],
    body: Body | None = None,
    max_page_retries: int | None = None,
    cursor_parameter: str = CURSOR_PARAMETER,
) -> list[Any]:
    """Fetch every item from a cursor-paginated endpoint.

    The first request goes out without a cursor. Each following request
    carries the token returned by the previous page.
    """
    retries = _retry_budget(invoker, max_page_retries)
    result: list[Any] = []
    cursor: str | None = None
    failures = 0

    while True:
        page_request = request
        if cursor is not None:
            page_request = request.with_query(cursor_parameter, cursor)

        resp = invoker.invoke(page_request, body)
        if not is_success(resp.status_code):
            logger.error("Error fetching objects: %s", resp.status_code)
            failures += 1
            if failures > retries:
                break
            continue

        failures = 0
        page = decode_page(resp, page_type)
        result.extend(page.paged_items)
        cursor = page.next_cursor
        if cursor is None:
            break

    logger.debug("Fetched %d objects by cursor", len(result))
    return result
