"""Request coordinates, bodies and paged response models."""

from __future__ import annotations

import base64
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union

import requests
from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_jsonable_python

from .errors import UnsupportedMethodError

# Query parameter carrying the continuation token for cursor pagination
CURSOR_PARAMETER = "cursor"

# Basic credentials are encoded as ASCII, as the remote side expects
AUTH_ENCODING = "ascii"


# === Request ===

class HttpMethod(str, Enum):
    """Supported HTTP methods."""
    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    DELETE = "DELETE"
    POST = "POST"
    PUT = "PUT"

    @classmethod
    def parse(cls, token: str | HttpMethod) -> HttpMethod:
        """Return the member for ``token`` or raise UnsupportedMethodError."""
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            raise UnsupportedMethodError(token) from None

    @property
    def sends_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT)


@dataclass(frozen=True)
class Cookie:
    """A cookie attached to an outgoing request."""
    name: str
    value: str
    domain: str | None = None
    path: str | None = None


@dataclass(frozen=True)
class BasicAuth:
    """Basic authentication credentials."""
    username: str
    password: str

    def header_value(self) -> str:
        raw = f"{self.username}:{self.password}".encode(AUTH_ENCODING)
        return "Basic " + base64.b64encode(raw).decode(AUTH_ENCODING)


@dataclass(frozen=True)
class RequestCoordinates:
    """Everything needed to address a single HTTP request.

    ``path`` may contain ``{name}`` placeholders filled from
    ``path_parameters``. Header and query values may be a single value or a
    sequence of values.
    """
    scheme: str
    host: str
    path: str
    method: str | HttpMethod = HttpMethod.GET
    path_parameters: Mapping[str, str] = field(default_factory=dict)
    username: str | None = None
    password: str | None = None
    headers: Mapping[str, Any] = field(default_factory=dict)
    cookies: Sequence[Cookie] = ()
    query_parameters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def basic_auth(self) -> BasicAuth | None:
        """Credentials, only when both username and password are set."""
        if self.username is None or self.password is None:
            return None
        return BasicAuth(self.username, self.password)

    def with_query(self, name: str, value: Any) -> RequestCoordinates:
        """Return a copy with query parameter ``name`` set to ``value``."""
        query = dict(self.query_parameters)
        query[name] = value
        return dataclasses.replace(self, query_parameters=query)


# === Bodies ===

@dataclass(frozen=True)
class TextBody:
    """Plain-text request body."""
    text: str
    content_type: ClassVar[str] = "text/plain"

    def encode(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class JsonBody:
    """Structured request body, sent as pretty-printed JSON."""
    payload: Any
    content_type: ClassVar[str] = "application/json"

    def encode(self) -> bytes:
        """Serialize the payload.

        Raises:
            pydantic_core.PydanticSerializationError: For values with no JSON form.
        """
        payload = to_jsonable_python(self.payload, by_alias=True)
        return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


Body = Union[TextBody, JsonBody]


# === Responses ===

def is_success(status_code: int) -> bool:
    """Status check used by the pagination loops.

    This is a bit mask, not a range check: 201 passes, 208 does not.
    """
    return (status_code & requests.codes.ok) == requests.codes.ok


class OffsetPage(BaseModel):
    """A page addressed by a numeric start offset.

    Subclasses declare the fields of the remote payload and expose the
    page's items through ``paged_items``. Unknown fields are ignored.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def paged_items(self) -> list[Any]:
        raise NotImplementedError


class CursorPage(BaseModel):
    """A page carrying an optional continuation token."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def paged_items(self) -> list[Any]:
        raise NotImplementedError

    @property
    def next_cursor(self) -> str | None:
        raise NotImplementedError


class ValuesPage(OffsetPage):
    """Offset page with items under ``values`` (e.g. ``?startAt=`` APIs)."""
    values: list[Any] = Field(default_factory=list)
    start_at: int | None = Field(default=None, alias="startAt")
    max_results: int | None = Field(default=None, alias="maxResults")
    total: int | None = None
    is_last: bool | None = Field(default=None, alias="isLast")

    @property
    def paged_items(self) -> list[Any]:
        return self.values


class ResultsCursorPage(CursorPage):
    """Cursor page with items under ``results`` and a ``nextPageCursor`` token."""
    results: list[Any] = Field(default_factory=list)
    next_page_cursor: str | None = Field(default=None, alias="nextPageCursor")

    @property
    def paged_items(self) -> list[Any]:
        return self.results

    @property
    def next_cursor(self) -> str | None:
        return self.next_page_cursor


def offset_page_for(items_field: str) -> type[OffsetPage]:
    """Build an OffsetPage type reading its items from ``items_field``."""

    class FieldOffsetPage(OffsetPage):
        model_config = ConfigDict(extra="allow")

        @property
        def paged_items(self) -> list[Any]:
            return list((self.model_extra or {}).get(items_field) or [])

    return FieldOffsetPage


def cursor_page_for(items_field: str, cursor_field: str) -> type[CursorPage]:
    """Build a CursorPage type reading items and token from the named fields."""

    class FieldCursorPage(CursorPage):
        model_config = ConfigDict(extra="allow")

        @property
        def paged_items(self) -> list[Any]:
            return list((self.model_extra or {}).get(items_field) or [])

        @property
        def next_cursor(self) -> str | None:
            token = (self.model_extra or {}).get(cursor_field)
            return None if token is None else str(token)

    return FieldCursorPage
