"""
treegrab: fetch the complete file tree of a GitHub repository and download
selected files with bounded concurrency.
"""

__version__ = "0.1.0"

from .core.filter import FilterEngine
from .core.orchestrator import DownloadOrchestrator
from .core.tree import assemble_tree, prune, resolve, resolve_any, resolve_blob, resolve_tree, walk
from .infrastructure.error_handler import (
    ConfigurationError,
    DecodeError,
    FilesystemError,
    RateLimitError,
    RemoteApiError,
    TransportError,
    TreeAssemblyError,
    TreeGrabError,
)
from .interfaces.api import GitHubDownloader
from .models import (
    DownloadCompleted,
    DownloadConfig,
    DownloadEvent,
    DownloadFailed,
    DownloadReporter,
    DownloadStarted,
    FilterSpec,
    FlatEntry,
    LoggingDownloadReporter,
    NullDownloadReporter,
    RepoRef,
    Tree,
    TreeEntryKind,
    TreeListing,
)

__all__ = [
    "__version__",
    "GitHubDownloader",
    "DownloadOrchestrator",
    "FilterEngine",
    "assemble_tree",
    "walk",
    "resolve",
    "resolve_blob",
    "resolve_tree",
    "resolve_any",
    "prune",
    "RepoRef",
    "TreeEntryKind",
    "FlatEntry",
    "TreeListing",
    "Tree",
    "FilterSpec",
    "DownloadEvent",
    "DownloadStarted",
    "DownloadCompleted",
    "DownloadFailed",
    "DownloadReporter",
    "NullDownloadReporter",
    "LoggingDownloadReporter",
    "DownloadConfig",
    "TreeGrabError",
    "TransportError",
    "DecodeError",
    "FilesystemError",
    "RemoteApiError",
    "RateLimitError",
    "ConfigurationError",
    "TreeAssemblyError",
]
