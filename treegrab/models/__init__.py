"""
Core data models API surface for treegrab.

This file re-exports model classes from domain-specific modules so that
imports like `from treegrab.models import X` work.
"""

from .github import (
    TreeEntryKind,
    RepoRef,
    FlatEntry,
    TreeListing,
)
from .tree import Tree
from .download import (
    FilterSpec,
    DownloadStatus,
    DownloadStarted,
    DownloadCompleted,
    DownloadFailed,
    DownloadEvent,
    DownloadReporter,
    NullDownloadReporter,
    LoggingDownloadReporter,
)
from .config import DownloadConfig

__all__ = [
    # GitHub models
    "TreeEntryKind",
    "RepoRef",
    "FlatEntry",
    "TreeListing",
    "Tree",
    # Download models
    "FilterSpec",
    "DownloadStatus",
    "DownloadStarted",
    "DownloadCompleted",
    "DownloadFailed",
    "DownloadEvent",
    "DownloadReporter",
    "NullDownloadReporter",
    "LoggingDownloadReporter",
    # Config models
    "DownloadConfig",
]
