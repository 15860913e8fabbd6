"""
Tracking of the GitHub API rate limit as reported in response headers.

treegrab never waits or retries on its own; the snapshot is kept so that
callers and error messages can tell how much budget is left and when it resets.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .logger import logger


@dataclass
class RateLimitInfo:
    """Snapshot of the rate limit headers of the latest response."""

    limit: int = 5000
    remaining: int = 5000
    used: int = 0
    reset_time: Optional[datetime] = None

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    @property
    def reset_in_seconds(self) -> float:
        if not self.reset_time:
            return 0.0
        return max(0.0, (self.reset_time - datetime.now()).total_seconds())


class RateLimitMonitor:
    """Keeps the most recent RateLimitInfo seen across requests."""

    def __init__(self) -> None:
        self._info = RateLimitInfo()
        self._seen_headers = False

    @property
    def info(self) -> RateLimitInfo:
        return self._info

    @property
    def has_data(self) -> bool:
        return self._seen_headers

    def update(self, headers: Mapping[str, str]) -> RateLimitInfo:
        """
        Update the snapshot from GitHub's ``x-ratelimit-*`` headers.

        Headers that are absent or malformed leave the previous values alone.
        """
        fields = {
            "limit": "x-ratelimit-limit",
            "remaining": "x-ratelimit-remaining",
            "used": "x-ratelimit-used",
        }
        for attr, header in fields.items():
            value = headers.get(header)
            if value is None:
                continue
            try:
                setattr(self._info, attr, int(value))
                self._seen_headers = True
            except ValueError:
                logger.debug(f"Ignoring malformed {header} header: {value!r}")

        reset = headers.get("x-ratelimit-reset")
        if reset is not None:
            try:
                self._info.reset_time = datetime.fromtimestamp(int(reset))
                self._seen_headers = True
            except (ValueError, OverflowError, OSError):
                logger.debug(f"Ignoring malformed x-ratelimit-reset header: {reset!r}")

        return self._info


__all__ = ["RateLimitInfo", "RateLimitMonitor"]
