"""
Download domain models for treegrab.

This module contains the include/exclude filter and the per-file lifecycle
events reported while a tree is being downloaded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from ..infrastructure.error_handler import TreeGrabError
from ..infrastructure.logger import logger


@dataclass(frozen=True)
class FilterSpec:
    """
    Include/exclude glob patterns deciding which paths are kept.

    - With only ``included`` patterns, they act as a whitelist.
    - With only ``excluded`` patterns, they act as a blacklist.
    - With both, a path must match an included pattern and no excluded one.
    - With neither, every path passes; use ``FilterSpec.all()`` for that case.
    """

    included: Tuple[str, ...] = field(default_factory=tuple)
    excluded: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of patterns but store tuples
        object.__setattr__(self, 'included', tuple(self.included))
        object.__setattr__(self, 'excluded', tuple(self.excluded))

    @classmethod
    def all(cls) -> FilterSpec:
        """Create a filter that passes for every path."""
        return cls()

    def matches_path(self, path: str) -> bool:
        """Check if a given path passes this filter."""

        from ..core.filter import FilterEngine

        return FilterEngine(self).check(path)


class DownloadStatus(Enum):
    """Lifecycle stage of a single file download."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DownloadStarted:
    path: str
    status: DownloadStatus = field(default=DownloadStatus.STARTED, init=False)


@dataclass(frozen=True)
class DownloadCompleted:
    path: str
    status: DownloadStatus = field(default=DownloadStatus.COMPLETED, init=False)


@dataclass(frozen=True)
class DownloadFailed:
    path: str
    error: TreeGrabError
    status: DownloadStatus = field(default=DownloadStatus.FAILED, init=False)


DownloadEvent = Union[DownloadStarted, DownloadCompleted, DownloadFailed]


class DownloadReporter:
    """
    Observer receiving one event per lifecycle stage of each file.

    ``on_event`` is called from many concurrent download tasks and must
    not assume any ordering between different files.
    """

    def on_event(self, event: DownloadEvent) -> None:
        pass


class NullDownloadReporter(DownloadReporter):
    """Reporter that ignores every event."""


class LoggingDownloadReporter(DownloadReporter):
    """Reporter that writes every event to the package logger."""

    def on_event(self, event: DownloadEvent) -> None:
        if isinstance(event, DownloadFailed):
            logger.error(f"Download failed: {event.path}: {event.error}")
        elif isinstance(event, DownloadCompleted):
            logger.debug(f"Download completed: {event.path}")
        else:
            logger.debug(f"Download started: {event.path}")


__all__ = [
    "FilterSpec",
    "DownloadStatus",
    "DownloadStarted",
    "DownloadCompleted",
    "DownloadFailed",
    "DownloadEvent",
    "DownloadReporter",
    "NullDownloadReporter",
    "LoggingDownloadReporter",
]
