"""
Orchestrator for downloading the files of a repository tree
with bounded concurrency and per-file event reporting.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..infrastructure.error_handler import FilesystemError, TreeGrabError, wrap_error
from ..infrastructure.logger import logger
from ..models import (
    DownloadCompleted, DownloadFailed, DownloadReporter, DownloadStarted,
    FilterSpec, NullDownloadReporter, Tree
)
from ..services import GitHubAPIService, DownloadService
from .filter import FilterEngine
from .tree import walk



####
##      DOWNLOAD STATISTICS MODEL
#####
@dataclass
class DownloadStatistics:
    """Counters for one download run."""

    total_files: int = 0
    downloaded_files: int = 0
    failed_files: int = 0
    total_bytes: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def success_rate(self) -> float:
        """Percentage of attempted files that were written."""

        total_attempted = self.downloaded_files + self.failed_files
        if total_attempted > 0:
            return (self.downloaded_files / total_attempted) * 100.0
        return 0.0


####
##      DOWNLOAD ORCHESTRATOR
#####
class DownloadOrchestrator:
    """
    Downloads the blobs of a tree, never running more than
    ``max_concurrent_downloads`` fetches at the same time.
    """

    def __init__(
        self,
        github_service: GitHubAPIService,
        download_service: DownloadService,
        max_concurrent_downloads: int = 5,
        stop_on_failure: bool = False
    ):
        self.github_service = github_service
        self.download_service = download_service
        self.max_concurrent_downloads = max(1, max_concurrent_downloads)
        self.stop_on_failure = stop_on_failure
        self.last_statistics: Optional[DownloadStatistics] = None

    async def download_tree(
        self,
        tree: Tree,
        destination: Union[str, Path],
        filters: Optional[FilterSpec] = None,
        reporter: Optional[DownloadReporter] = None
    ) -> List[Tree]:
        """
        Download every blob of ``tree`` that passes ``filters``.

        Args:
            tree: Assembled repository tree
            destination: Directory the repository paths are written under
            filters: Path filter, everything passes when omitted
            reporter: Observer for per-file lifecycle events

        Returns:
            All selected file nodes, in pre-order

        Raises:
            TreeGrabError: The first failure observed, after every launched
                download has finished
        """
        filter_engine = FilterEngine(filters or FilterSpec.all())
        filter_result = filter_engine.filter_files(walk(tree))
        target_files = filter_result.included_files

        logger.debug(
            f"Selected {filter_result.filtered_files}/{filter_result.total_files} "
            "nodes for download"
        )

        stats = DownloadStatistics(total_files=len(target_files), start_time=datetime.now())
        self.last_statistics = stats

        try:
            await self._download_files_concurrently(
                target_files,
                Path(destination),
                reporter or NullDownloadReporter(),
                stats
            )
        finally:
            stats.end_time = datetime.now()
            logger.debug(
                f"Download finished: {stats.downloaded_files} successful, "
                f"{stats.failed_files} failed, {stats.total_bytes} bytes "
                f"in {stats.duration_seconds:.2f}s"
            )

        return target_files

    async def _download_files_concurrently(
        self,
        files: List[Tree],
        destination: Path,
        reporter: DownloadReporter,
        stats: DownloadStatistics
    ) -> None:
        """
        Launch downloads in order, waiting for a free slot before each launch.

        In-flight downloads are always awaited before returning, even when
        the launcher itself is cancelled.
        """
        semaphore = asyncio.Semaphore(self.max_concurrent_downloads)
        errors: List[TreeGrabError] = []
        tasks: List[asyncio.Task] = []

        def release_slot(task: asyncio.Task) -> None:
            semaphore.release()
            # Errors escaping the task itself, e.g. from the reporter
            if not task.cancelled() and task.exception() is not None:
                error = wrap_error(task.exception())
                logger.error(f"Download task failed: {error}")
                errors.append(error)

        try:
            for file in files:
                await semaphore.acquire()

                if errors and self.stop_on_failure:
                    semaphore.release()
                    logger.debug(f"Not launching remaining downloads after failure, next was {file.path}")
                    break

                task = asyncio.create_task(
                    self._download_single_file(file, destination, reporter, stats, errors)
                )
                task.add_done_callback(release_slot)
                tasks.append(task)

        finally:
            if tasks:
                await asyncio.wait(tasks)

        if errors:
            raise errors[0]

    async def _download_single_file(
        self,
        file: Tree,
        destination: Path,
        reporter: DownloadReporter,
        stats: DownloadStatistics,
        errors: List[TreeGrabError]
    ) -> None:
        """
        Fetch, decode and write one blob, reporting its lifecycle.

        Failures are recorded in ``errors`` and reported, not raised.
        """
        try:
            reporter.on_event(DownloadStarted(path=file.path))

            target = self._target_path(destination, file.path)
            content = await self.github_service.get_blob_content(file.url)
            bytes_written = await self.download_service.save_content(content, target)

        except Exception as e:
            error = wrap_error(e, file.path)
            errors.append(error)
            stats.failed_files += 1
            logger.error(f"Error downloading {file.path}: {error}")
            reporter.on_event(DownloadFailed(path=file.path, error=error))
            return

        stats.downloaded_files += 1
        stats.total_bytes += bytes_written
        logger.debug(f"Downloaded {file.path} ({bytes_written} bytes)")
        reporter.on_event(DownloadCompleted(path=file.path))

    @staticmethod
    def _target_path(destination: Path, path: str) -> Path:
        """Map a repository path under ``destination``, refusing to leave it."""

        root = destination.resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise FilesystemError(f"Refusing to write {path!r} outside {destination}")
        return target


__all__ = ["DownloadOrchestrator", "DownloadStatistics"]
