"""Exception types raised by the request client.

Non-success HTTP statuses are not errors at this layer; they come back as
ordinary responses. Transport failures surface as ``requests`` exceptions.
"""

from __future__ import annotations


class WebRequestError(Exception):
    """Base error for request construction failures."""


class MalformedRequestError(WebRequestError, ValueError):
    """Raised when scheme, host and path cannot be built into a valid URL."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UnsupportedMethodError(WebRequestError, ValueError):
    """Raised for an HTTP method token outside the supported set."""

    def __init__(self, method: object) -> None:
        super().__init__(f'Invalid method "{method}"')
        self.method = method
