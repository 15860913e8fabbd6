"""
Public interfaces for treegrab.
"""

from .api import GitHubDownloader

__all__ = ["GitHubDownloader"]
