"""Tests for correlation IDs and structured log output"""

import json
import logging

import pytest

from memberportal.observability.logging_config import JSONFormatter, RequestIDFilter
from memberportal.observability.request_id import (
    NO_REQUEST_ID,
    generate_request_id,
    get_request_id,
    sanitize_request_id,
    set_request_id,
)


@pytest.fixture(autouse=True)
def reset_request_id():
    yield
    set_request_id(None)


class TestRequestID:

    def test_default_when_unset(self):
        assert get_request_id() == NO_REQUEST_ID

    def test_prefixed_run_id(self):
        run_id = generate_request_id("retention")

        assert run_id.startswith("retention-")
        assert len(run_id) == len("retention-") + 32

    @pytest.mark.parametrize("value", ["abc-123", "req.42:retry_1", "a" * 128])
    def test_accepts_log_safe_ids(self, value):
        assert sanitize_request_id(value) == value

    @pytest.mark.parametrize("value", [None, "", "a" * 129, "bad id", "x\ninjected"])
    def test_rejects_unsafe_ids(self, value):
        assert sanitize_request_id(value) is None


class TestJSONFormatter:

    def _format(self, **extra):
        record = logging.LogRecord(
            name="memberportal.retention.service",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Retention pass finished",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        RequestIDFilter().filter(record)
        return json.loads(JSONFormatter().format(record))

    def test_includes_correlation_id(self):
        set_request_id("retention-abc")

        payload = self._format()

        assert payload["request_id"] == "retention-abc"
        assert payload["message"] == "Retention pass finished"
        assert payload["level"] == "INFO"

    def test_known_extras_only(self):
        payload = self._format(pass_name="messages", member_id="m-1", password="secret")

        assert payload["pass_name"] == "messages"
        assert payload["member_id"] == "m-1"
        assert "password" not in payload


class TestMiddleware:

    def test_echoes_safe_request_id(self, client):
        response = client.get("/health", headers={"X-Request-ID": "probe-1"})

        assert response.headers["X-Request-ID"] == "probe-1"

    def test_replaces_unsafe_request_id(self, client):
        response = client.get("/health", headers={"X-Request-ID": "not safe"})

        assert response.headers["X-Request-ID"] != "not safe"
        assert len(response.headers["X-Request-ID"]) == 32
