"""Rate-limited HTTP request helper with pagination draining."""

from .errors import MalformedRequestError, UnsupportedMethodError, WebRequestError
from .invoker import RequestInvoker, basic_auth_header, build_url, substitute_path
from .models import (
    CURSOR_PARAMETER,
    BasicAuth,
    Body,
    Cookie,
    CursorPage,
    HttpMethod,
    JsonBody,
    OffsetPage,
    RequestCoordinates,
    ResultsCursorPage,
    TextBody,
    ValuesPage,
    cursor_page_for,
    is_success,
    offset_page_for,
)
from .pagination import decode_page, fetch_objects_with_cursor, fetch_objects_with_start_at
from .rate_limiter import (
    RateLimiter,
    RateLimiterHandle,
    get_rate_limiter,
    set_rate,
    wait_for_admission,
)

__all__ = [
    "CURSOR_PARAMETER",
    "BasicAuth",
    "Body",
    "Cookie",
    "CursorPage",
    "HttpMethod",
    "JsonBody",
    "MalformedRequestError",
    "OffsetPage",
    "RateLimiter",
    "RateLimiterHandle",
    "RequestCoordinates",
    "RequestInvoker",
    "ResultsCursorPage",
    "TextBody",
    "UnsupportedMethodError",
    "ValuesPage",
    "WebRequestError",
    "basic_auth_header",
    "build_url",
    "cursor_page_for",
    "decode_page",
    "fetch_objects_with_cursor",
    "fetch_objects_with_start_at",
    "get_rate_limiter",
    "is_success",
    "offset_page_for",
    "set_rate",
    "substitute_path",
    "wait_for_admission",
]
