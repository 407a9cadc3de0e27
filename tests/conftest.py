"""Shared test fixtures for webrequest."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

# Ensure the package is importable without installation
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from webrequest.common.config import HttpSettings
from webrequest.client.invoker import RequestInvoker
from webrequest.client.rate_limiter import RateLimiter, RateLimiterHandle


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_response(status_code: int = 200, payload=None, url: str = "https://api.example.com/") -> requests.Response:
    """Build a requests.Response with a JSON body."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = "application/json"
    resp._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return resp


@pytest.fixture(name="make_response")
def make_response_fixture():
    """Return the response factory."""
    return make_response


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(start=1_000_000.0)


@pytest.fixture
def limiter() -> MagicMock:
    """Limiter stub that always admits and counts admissions."""
    stub = MagicMock(spec=RateLimiterHandle)
    stub.admit.return_value = True
    return stub


@pytest.fixture
def http_settings() -> HttpSettings:
    return HttpSettings(request_timeout=5, poll_interval_ms=1)


@pytest.fixture
def session():
    """Real session whose network send is replaced by a mock."""
    sess = requests.Session()
    with patch.object(sess, "send", return_value=make_response(200, {})) as send:
        sess.mock_send = send
        yield sess
    sess.close()


@pytest.fixture
def invoker(http_settings, session, limiter) -> RequestInvoker:
    return RequestInvoker(settings=http_settings, session=session, limiter=limiter)


@pytest.fixture
def fake_invoker(http_settings) -> MagicMock:
    """Invoker stub for pagination tests; queue responses via invoke.side_effect."""
    stub = MagicMock(spec=RequestInvoker)
    stub.settings = http_settings
    return stub


@pytest.fixture
def generous_limiter() -> RateLimiterHandle:
    return RateLimiterHandle(RateLimiter(rate=1000, period_ms=1000))
