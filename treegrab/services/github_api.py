"""
GitHub REST client for the git trees and blobs endpoints.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..core.tree import assemble_tree, count_entries
from ..infrastructure.error_handler import (
    ConfigurationError,
    DecodeError,
    RateLimitError,
    RemoteApiError,
    TransportError,
)
from ..infrastructure.logger import logger
from ..infrastructure.rate_limiter import RateLimitInfo, RateLimitMonitor
from ..models import DownloadConfig, FlatEntry, RepoRef, Tree, TreeEntryKind, TreeListing
from .download import decode_blob_content


# Submodules show up as 'commit' entries and have no content to fetch
SUBMODULE_ENTRY_TYPE = "commit"


def _parse_entry(raw: Dict[str, Any]) -> Optional[FlatEntry]:
    entry_type = raw["type"]
    if entry_type == SUBMODULE_ENTRY_TYPE:
        logger.debug(f"Skipping submodule entry {raw.get('path')!r}")
        return None

    try:
        kind = TreeEntryKind(entry_type)
    except ValueError as e:
        raise DecodeError(f"Unknown tree entry type {entry_type!r}", e)

    return FlatEntry(
        path=raw["path"],
        mode=raw["mode"],
        kind=kind,
        sha=raw["sha"],
        url=raw.get("url", ""),
        size=int(raw.get("size") or 0)
    )


def parse_tree_listing(payload: Dict[str, Any]) -> TreeListing:
    """
    Convert a ``git/trees`` response body into a TreeListing.

    Raises:
        DecodeError: If required fields are missing or malformed
    """
    try:
        entries = [
            entry for entry in (_parse_entry(raw) for raw in payload["tree"])
            if entry is not None
        ]
        return TreeListing(
            sha=payload["sha"],
            url=payload.get("url", ""),
            entries=entries,
            truncated=bool(payload.get("truncated", False))
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError("Malformed tree listing payload", e)


class GitHubAPIService:
    """
    Fetches tree listings and blob contents from the GitHub API.

    The HTTP client and its headers are created once and shared by every
    request. Pass ``client`` to supply a preconfigured ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        config: Optional[DownloadConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or DownloadConfig()
        self.headers = self._build_headers()
        self.rate_limiter = RateLimitMonitor()
        self._client = client
        self._owns_client = client is None

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self.config.user_agent,
        }

        token = self.config.access_token
        if token is not None:
            if not token or any(char.isspace() for char in token):
                raise ConfigurationError("Access token must be a non-empty string without whitespace")
            headers["Authorization"] = f"Bearer {token}"

        return headers

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    @property
    def rate_limit_info(self) -> RateLimitInfo:
        return self.rate_limiter.info

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubAPIService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        GET ``url`` and return the decoded JSON object.

        Raises:
            TransportError: On network failures or an HTTP error without payload
            DecodeError: If the body is not a JSON object
            RemoteApiError: If the body is an error payload
        """
        try:
            response = await self.client.get(url, headers=self.headers, params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed", e)

        self.rate_limiter.update(response.headers)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            if response.is_error:
                raise TransportError(f"GitHub API returned HTTP {response.status_code} for {url}")
            raise DecodeError(f"Response from {url} is not valid JSON", e)

        if not isinstance(payload, dict):
            raise DecodeError(f"Response from {url} is not a JSON object")

        if "message" in payload and "tree" not in payload and "content" not in payload:
            self._raise_api_error(payload["message"], response.status_code)

        if response.is_error:
            raise TransportError(f"GitHub API returned HTTP {response.status_code} for {url}")

        return payload

    def _raise_api_error(self, message: str, status_code: int) -> None:
        info = self.rate_limiter.info
        exhausted = self.rate_limiter.has_data and info.is_exhausted
        if status_code == 429 or exhausted:
            raise RateLimitError(message, status_code=status_code, rate_limit=info)
        raise RemoteApiError(message, status_code=status_code, rate_limit=info)

    async def get_tree_listing(self, ref: RepoRef, recursive: bool = False) -> TreeListing:
        """
        Request one listing of the trees endpoint.

        Args:
            ref: Repository snapshot to list
            recursive: Ask the API to flatten the whole tree

        Returns:
            The listing as reported, possibly truncated
        """
        url = ref.tree_url(self.config.api_base_url)
        params = {"recursive": "1"} if recursive else None
        logger.debug(f"Requesting tree listing {url} (recursive={recursive})")
        payload = await self._get_json(url, params=params)
        return parse_tree_listing(payload)

    async def fetch_listing(self, ref: RepoRef) -> TreeListing:
        """
        Fetch the complete flat listing of ``ref``.

        A recursive listing is tried first. When GitHub truncates it, the tree
        is walked one directory at a time with non-recursive requests.

        Args:
            ref: Repository snapshot to fetch

        Returns:
            Non-truncated listing whose entry paths are relative to the root
        """
        recursive = await self.get_tree_listing(ref, recursive=True)
        if not recursive.truncated:
            return recursive

        logger.info(
            f"Recursive listing of {ref.display_name} was truncated after "
            f"{len(recursive.entries)} entries, walking directories individually"
        )

        root = await self.get_tree_listing(ref, recursive=False)
        entries: List[FlatEntry] = list(root.entries)
        self._warn_if_truncated(root, "")

        # Depth first over subdirectories, each addressed by its own tree sha
        pending: List[Tuple[str, str]] = [
            (entry.path, entry.sha) for entry in reversed(root.entries)
            if entry.kind is TreeEntryKind.TREE
        ]
        while pending:
            prefix, sha = pending.pop()
            listing = await self.get_tree_listing(ref.with_ref(sha), recursive=False)
            self._warn_if_truncated(listing, prefix)

            level = [
                FlatEntry(
                    path=f"{prefix}/{entry.path}",
                    mode=entry.mode,
                    kind=entry.kind,
                    sha=entry.sha,
                    url=entry.url,
                    size=entry.size
                )
                for entry in listing.entries
            ]
            entries.extend(level)
            pending.extend(
                (entry.path, entry.sha) for entry in reversed(level)
                if entry.kind is TreeEntryKind.TREE
            )

        counts = count_entries(entries)
        logger.debug(
            f"Walked {ref.display_name}: {counts[TreeEntryKind.BLOB]} files, "
            f"{counts[TreeEntryKind.TREE]} directories"
        )
        return TreeListing(sha=root.sha, url=root.url, entries=entries, truncated=False)

    @staticmethod
    def _warn_if_truncated(listing: TreeListing, prefix: str) -> None:
        if listing.truncated:
            logger.warning(f"Listing of directory {prefix or '/'!r} is truncated; entries may be missing")

    async def get_tree(self, ref: RepoRef) -> Tree:
        """Fetch and assemble the full tree of ``ref``."""
        listing = await self.fetch_listing(ref)
        return assemble_tree(listing)

    async def get_blob_content(self, url: str) -> bytes:
        """
        Fetch a blob by its API url and return the decoded bytes.

        Raises:
            RemoteApiError: If GitHub answers with an error payload
            DecodeError: If the payload or its content cannot be decoded
        """
        payload = await self._get_json(url)
        try:
            content = payload["content"]
            encoding = payload.get("encoding", "base64")
        except KeyError as e:
            raise DecodeError(f"Blob payload from {url} has no content", e)
        return decode_blob_content(content, encoding)


__all__ = ["GitHubAPIService", "parse_tree_listing"]
