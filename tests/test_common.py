"""Tests for shared common modules: config and logging."""

import io
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from webrequest.common.config import CONFIG_DIR, HttpSettings, RateLimitSettings, Settings
from webrequest.common.logging import setup_logging

ENV_VARS = [
    "WEBREQUEST_RATE",
    "WEBREQUEST_PERIOD_MS",
    "WEBREQUEST_REQUEST_TIMEOUT",
    "WEBREQUEST_POLL_INTERVAL_MS",
    "WEBREQUEST_MAX_PAGE_RETRIES",
    "WEBREQUEST_PUT_TEXT_AS_POST",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.rate_limit.rate == 100
        assert s.rate_limit.period_ms == 1000
        assert s.http.poll_interval_ms == 100
        assert s.http.max_page_retries == 0
        assert s.http.put_text_as_post is False

    def test_missing_file_falls_back_to_defaults(self, tmp_path: Path, clean_env):
        s = Settings.load(tmp_path / "nope.yaml")
        assert s == Settings()

    def test_load_from_yaml(self, tmp_path: Path, clean_env):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "rate_limit:\n  rate: 10\n  period_ms: 500\nhttp:\n  request_timeout: 3.5\n",
            encoding="utf-8",
        )

        s = Settings.load(path)

        assert s.rate_limit == RateLimitSettings(rate=10, period_ms=500)
        assert s.http.request_timeout == 3.5
        assert s.http.poll_interval_ms == 100

    def test_empty_yaml(self, tmp_path: Path, clean_env):
        path = tmp_path / "settings.yaml"
        path.write_text("", encoding="utf-8")

        assert Settings.load(path) == Settings()

    def test_env_overrides_file(self, tmp_path: Path, clean_env):
        path = tmp_path / "settings.yaml"
        path.write_text("rate_limit:\n  rate: 10\n", encoding="utf-8")
        clean_env.setenv("WEBREQUEST_RATE", "25")
        clean_env.setenv("WEBREQUEST_PERIOD_MS", "2000")
        clean_env.setenv("WEBREQUEST_MAX_PAGE_RETRIES", "3")
        clean_env.setenv("WEBREQUEST_PUT_TEXT_AS_POST", "true")

        s = Settings.load(path)

        assert s.rate_limit.rate == 25
        assert s.rate_limit.period_ms == 2000
        assert s.http.max_page_retries == 3
        assert s.http.put_text_as_post is True

    def test_invalid_values_rejected(self, tmp_path: Path, clean_env):
        clean_env.setenv("WEBREQUEST_PERIOD_MS", "0")

        with pytest.raises(ValidationError):
            Settings.load(tmp_path / "nope.yaml")

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            HttpSettings(max_page_retries=-1)

    def test_shipped_settings_file_loads(self, clean_env):
        s = Settings.load(CONFIG_DIR / "settings.yaml")
        assert s.rate_limit.rate == 100
        assert s.http.put_text_as_post is False


class TestSetupLogging:
    def test_configures_handler_once(self):
        stream = io.StringIO()
        logger = setup_logging(module_name="webrequest.test_once", stream=stream)
        again = setup_logging(level=logging.DEBUG, module_name="webrequest.test_once")

        assert again is logger
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_format(self):
        stream = io.StringIO()
        logger = setup_logging(module_name="webrequest.test_format", stream=stream)

        logger.error("Error fetching objects: %s", 500)

        line = stream.getvalue()
        assert "[ERROR] webrequest.test_format: Error fetching objects: 500" in line
