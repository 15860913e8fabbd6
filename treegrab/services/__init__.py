"""
Service layer for treegrab: remote GitHub access and local file output.
"""

from .github_api import GitHubAPIService
from .download import DownloadService

__all__ = [
    "GitHubAPIService",
    "DownloadService",
]
