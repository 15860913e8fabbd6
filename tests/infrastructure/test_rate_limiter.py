# tests/infrastructure/test_rate_limiter.py

import time
from datetime import datetime, timedelta
from unittest.mock import patch

from treegrab.infrastructure.rate_limiter import RateLimitInfo, RateLimitMonitor


## 1. RateLimitInfo Helper Class Tests
# ------------------------------------

def test_rate_limit_info_is_exhausted():
    """Test the 'is_exhausted' property logic."""
    info = RateLimitInfo()
    info.remaining = 1
    assert not info.is_exhausted

    info.remaining = 0
    assert info.is_exhausted


def test_rate_limit_info_reset_in_seconds():
    """Test the calculation of seconds until reset."""
    info = RateLimitInfo()

    mock_now = datetime(2025, 10, 2, 12, 0, 0)
    with patch('treegrab.infrastructure.rate_limiter.datetime', autospec=True) as mock_datetime:
        mock_datetime.now.return_value = mock_now

        info.reset_time = mock_now + timedelta(seconds=30)
        assert info.reset_in_seconds == 30.0

        info.reset_time = mock_now - timedelta(seconds=30)
        assert info.reset_in_seconds == 0.0, "Should not return negative time"

        info.reset_time = None
        assert info.reset_in_seconds == 0.0


## 2. Update from Headers Tests
# ------------------------------

def test_update_sets_values_from_headers():
    monitor = RateLimitMonitor()
    reset_timestamp = int(time.time()) + 60

    info = monitor.update({
        "x-ratelimit-limit": "5000",
        "x-ratelimit-remaining": "4500",
        "x-ratelimit-used": "500",
        "x-ratelimit-reset": str(reset_timestamp),
    })

    assert monitor.has_data
    assert info is monitor.info
    assert info.limit == 5000
    assert info.remaining == 4500
    assert info.used == 500
    assert info.reset_time == datetime.fromtimestamp(reset_timestamp)


def test_update_without_headers_keeps_defaults():
    monitor = RateLimitMonitor()

    monitor.update({})

    assert not monitor.has_data
    assert monitor.info.remaining == 5000


def test_update_ignores_malformed_values():
    monitor = RateLimitMonitor()
    monitor.update({"x-ratelimit-remaining": "10"})

    monitor.update({"x-ratelimit-remaining": "lots", "x-ratelimit-reset": "soon"})

    assert monitor.info.remaining == 10
    assert monitor.info.reset_time is None
