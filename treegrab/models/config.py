"""
Configuration models for treegrab downloads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .. import __version__
from ..infrastructure.error_handler import ConfigurationError


DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_MAX_DOWNLOADS = 5
TOKEN_ENV_VARS = ("GITHUB_ACCESS_TOKEN", "GITHUB_TOKEN")


@dataclass
class DownloadConfig:
    """
    Settings shared by the tree fetch and the download pipeline.

    ``max_concurrent_downloads`` values below 1 are treated as 1.
    """

    max_concurrent_downloads: int = DEFAULT_MAX_DOWNLOADS
    access_token: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 300
    user_agent: str = f"treegrab/{__version__}"

    # Stop launching new downloads once one has failed
    stop_on_failure: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def effective_concurrency(self) -> int:
        return max(1, self.max_concurrent_downloads)

    @classmethod
    def from_env(cls, **overrides) -> DownloadConfig:
        """
        Build a config whose access token comes from the environment.

        ``GITHUB_ACCESS_TOKEN`` is preferred over ``GITHUB_TOKEN``. Explicit
        keyword overrides win over both.
        """
        token = next(
            (os.environ[name] for name in TOKEN_ENV_VARS if os.environ.get(name)),
            None
        )
        overrides.setdefault("access_token", token)
        return cls(**overrides)


__all__ = [
    "DownloadConfig",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_MAX_DOWNLOADS",
]
