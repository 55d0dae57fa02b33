"""
Tests for Sentry event filtering.
"""

import pytest
from fastapi import HTTPException
from unittest.mock import patch

from insightstream.services.error_tracking import ErrorTracker


@pytest.mark.unit
class TestBeforeSend:
    """Test which events reach Sentry and what they carry."""

    def test_health_and_tracking_dropped(self):
        for url in ("http://api/health/ready", "http://api/track/abc123"):
            assert ErrorTracker._before_send({"request": {"url": url}}, {}) is None

    def test_http_exceptions_dropped(self):
        error = HTTPException(status_code=404)
        hint = {"exc_info": (type(error), error, None)}
        assert ErrorTracker._before_send({}, hint) is None

    def test_credentials_redacted(self):
        event = {"request": {
            "url": "http://api/api/youtube/refresh",
            "headers": {"Authorization": "Bearer abc", "X-RapidAPI-Key": "secret", "Accept": "*/*"},
            "query_string": "measurement_id=G-1&api_secret=shh",
        }}

        result = ErrorTracker._before_send(event, {})

        assert result["request"]["headers"]["Authorization"] == "[redacted]"
        assert result["request"]["headers"]["X-RapidAPI-Key"] == "[redacted]"
        assert result["request"]["headers"]["Accept"] == "*/*"
        assert result["request"]["query_string"] == "[redacted]"

    def test_disabled_tracker_is_noop(self):
        tracker = ErrorTracker()

        with patch("insightstream.services.error_tracking.sentry_sdk.capture_exception") as capture:
            tracker.capture_exception(RuntimeError("boom"), context={"user_id": "u1"})

        capture.assert_not_called()
