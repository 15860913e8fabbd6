"""
Python API for fetching and downloading GitHub repository trees.
"""

import dataclasses
import logging
from pathlib import Path
from typing import List, Optional, Union

import httpx

from ..core.orchestrator import DownloadOrchestrator
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimitInfo
from ..models import DownloadConfig, DownloadReporter, FilterSpec, RepoRef, Tree
from ..services import GitHubAPIService, DownloadService


class GitHubDownloader:
    """
    High level entry point: fetch a repository tree and write its files.

    Example:
        async with GitHubDownloader() as downloader:
            files = await downloader.download(
                "octocat", "Hello-World", "master", Path("out"),
                filters=FilterSpec(included=["src/**"])
            )
    """

    def __init__(
        self,
        auth_token: Optional[str] = None,
        config: Optional[DownloadConfig] = None,
        verbose: bool = False,
        client: Optional[httpx.AsyncClient] = None
    ):
        if config is None:
            config = DownloadConfig.from_env()
        if auth_token is not None:
            config = dataclasses.replace(config, access_token=auth_token)

        self.config = config
        self.auth_token = config.access_token
        self.verbose = verbose
        self._configure_logging()

        self.github_service = GitHubAPIService(config, client=client)
        self.download_service = DownloadService()
        self.orchestrator = DownloadOrchestrator(
            self.github_service,
            self.download_service,
            max_concurrent_downloads=config.effective_concurrency,
            stop_on_failure=config.stop_on_failure
        )

    def _configure_logging(self) -> None:
        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

    def set_verbose(self, verbose: bool) -> None:
        """Switch debug logging on or off."""
        self.verbose = verbose
        self._configure_logging()

    async def close(self) -> None:
        await self.github_service.close()

    async def __aenter__(self) -> "GitHubDownloader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def get_tree(self, owner: str, repo: str, ref: str) -> Tree:
        """
        Fetch the complete tree of ``owner/repo`` at ``ref``.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Branch name, tag or tree SHA

        Returns:
            Root node of the assembled tree
        """
        repo_ref = RepoRef(owner, repo, ref)
        logger.debug(f"Fetching tree for {repo_ref.display_name}")
        return await self.github_service.get_tree(repo_ref)

    async def download_tree(
        self,
        tree: Tree,
        destination: Union[str, Path],
        filters: Optional[FilterSpec] = None,
        reporter: Optional[DownloadReporter] = None
    ) -> List[Tree]:
        """Download the selected blobs of an already fetched tree."""
        return await self.orchestrator.download_tree(tree, destination, filters, reporter)

    async def download(
        self,
        owner: str,
        repo: str,
        ref: str,
        destination: Union[str, Path],
        filters: Optional[FilterSpec] = None,
        reporter: Optional[DownloadReporter] = None
    ) -> List[Tree]:
        """
        Fetch the tree of ``owner/repo`` at ``ref`` and download its files.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Branch name, tag or tree SHA
            destination: Output directory
            filters: Include/exclude globs, everything when omitted
            reporter: Observer for per-file events

        Returns:
            The file nodes selected for download
        """
        tree = await self.get_tree(owner, repo, ref)
        files = await self.download_tree(tree, destination, filters, reporter)
        logger.info(f"Downloaded {len(files)} files from {owner}/{repo}@{ref} to {destination}")
        return files

    def get_rate_limit_info(self) -> RateLimitInfo:
        """Rate limit snapshot from the most recent API response."""
        return self.github_service.rate_limit_info


__all__ = ["GitHubDownloader"]
