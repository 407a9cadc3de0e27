"""Single-request invocation against the shared rate limiter."""

from __future__ import annotations

import logging
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Mapping, Sequence
from urllib.parse import quote, urlsplit, urlunsplit

import requests
from requests.cookies import RequestsCookieJar
from requests.structures import CaseInsensitiveDict

from ..common.config import HttpSettings, settings as default_settings
from .errors import MalformedRequestError
from .models import BasicAuth, Body, Cookie, HttpMethod, RequestCoordinates, TextBody
from .rate_limiter import RateLimiter, RateLimiterHandle, get_rate_limiter, wait_for_admission

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")
HOST_DELIMITERS = "/?#@\\"
# RFC 3986 path characters plus "%" so pre-encoded values pass through
PATH_SAFE = "/:@!$&'()*+,;=-._~%"


def substitute_path(template: str, parameters: Mapping[str, str] | None) -> str:
    """Replace each ``{key}`` in ``template`` with its literal value.

    Placeholders without a matching key are left as they are.
    """
    path = template
    for key, value in (parameters or {}).items():
        path = path.replace("{" + key + "}", str(value))
    return path


def build_url(scheme: str, host: str, path: str) -> str:
    """Join scheme, host and an already-substituted path into a URL.

    The path is percent-encoded as a whole, so "?" and "#" in a path value
    stay part of the path.

    Raises:
        MalformedRequestError: If the pieces do not form a valid URL.
    """
    if not scheme or scheme.lower() not in SUPPORTED_SCHEMES:
        raise MalformedRequestError(f"Unsupported scheme: {scheme!r}")
    if not host or any(c.isspace() or c in HOST_DELIMITERS for c in host):
        raise MalformedRequestError(f"Invalid host: {host!r}")
    if path and not path.startswith("/"):
        path = "/" + path
    path = quote(path, safe=PATH_SAFE)

    url = urlunsplit((scheme.lower(), host, path, "", ""))
    try:
        parsed = urlsplit(url)
        # .port raises ValueError for a non-numeric or out-of-range port
        valid_host = bool(parsed.hostname) and parsed.port != 0
    except ValueError as exc:
        raise MalformedRequestError(f"Invalid URL: {exc}", url=url) from exc

    if not valid_host:
        raise MalformedRequestError(f"Invalid host: {host!r}", url=url)
    return url


def basic_auth_header(username: str, password: str) -> str:
    """Return the ``Authorization`` value for basic authentication."""
    return BasicAuth(username, password).header_value()


def _flatten_headers(headers: Mapping[str, Any] | None) -> CaseInsensitiveDict:
    """Collapse multi-valued headers into comma-separated values."""
    flat: CaseInsensitiveDict = CaseInsensitiveDict()
    for name, value in (headers or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set)):
            flat[name] = ", ".join(str(v) for v in value)
        else:
            flat[name] = str(value)
    return flat


def _cookie_jar(cookies: Sequence[Cookie]) -> RequestsCookieJar:
    jar = RequestsCookieJar()
    for cookie in cookies:
        kwargs: dict[str, str] = {}
        if cookie.domain is not None:
            kwargs["domain"] = cookie.domain
        if cookie.path is not None:
            kwargs["path"] = cookie.path
        jar.set(cookie.name, cookie.value, **kwargs)
    return jar


class RequestInvoker:
    """Builds and sends one HTTP request per ``invoke`` call.

    Every call waits on the rate limiter before it reaches the network.
    Non-success statuses come back as ordinary responses.

    Usage:
        with RequestInvoker() as invoker:
            resp = invoker.invoke(RequestCoordinates("https", "api.example.com", "/items"))
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        session: requests.Session | None = None,
        limiter: RateLimiterHandle | RateLimiter | None = None,
    ) -> None:
        self.settings = settings or default_settings.http
        self._session = session or requests.Session()
        # Responses must not feed cookies into later calls
        self._session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self._limiter = limiter or get_rate_limiter()

    def prepare(
        self,
        request: RequestCoordinates,
        body: Body | None = None,
    ) -> requests.PreparedRequest:
        """Build the request without sending it.

        Raises:
            UnsupportedMethodError: For a method outside the supported set.
            MalformedRequestError: If the URL cannot be built.
        """
        method = HttpMethod.parse(request.method)
        path = substitute_path(request.path, request.path_parameters)
        url = build_url(request.scheme, request.host, path)

        headers = _flatten_headers(request.headers)
        auth = request.basic_auth
        if auth is not None:
            headers["Authorization"] = auth.header_value()

        verb = method.value
        data: bytes | None = None
        if method.sends_body and body is not None:
            headers["Content-Type"] = body.content_type
            data = body.encode()
            if (
                method is HttpMethod.PUT
                and isinstance(body, TextBody)
                and self.settings.put_text_as_post
            ):
                verb = HttpMethod.POST.value
        elif body is not None:
            logger.debug("Ignoring body for %s %s", verb, url)

        jar = _cookie_jar(request.cookies)
        raw = requests.Request(
            method=verb,
            url=url,
            headers=dict(headers),
            params=dict(request.query_parameters),
            cookies=jar,
            data=data,
        )
        try:
            prepped = self._session.prepare_request(raw)
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema) as exc:
            raise MalformedRequestError(f"Invalid URL: {exc}", url=url) from exc

        # Only the caller's cookies go out, never the session's jar
        if "Cookie" not in headers:
            prepped.headers.pop("Cookie", None)
            prepped.prepare_cookies(jar)
        return prepped

    def invoke(
        self,
        request: RequestCoordinates,
        body: Body | None = None,
    ) -> requests.Response:
        """Send one request and return the raw response.

        Args:
            request: Request coordinates.
            body: Payload for POST and PUT; ignored for other methods.

        Returns:
            requests.Response, whatever its status.

        Raises:
            UnsupportedMethodError: For a method outside the supported set.
            MalformedRequestError: If the URL cannot be built.
            requests.RequestException: On transport failure.
        """
        prepped = self.prepare(request, body)

        wait_for_admission(self._limiter, self.settings.poll_interval_ms)

        send_kwargs = self._session.merge_environment_settings(
            prepped.url, {}, None, None, None
        )
        logger.debug("%s %s", prepped.method, prepped.url)
        return self._session.send(
            prepped, timeout=self.settings.request_timeout, **send_kwargs
        )

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> RequestInvoker:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
