"""
GitHub domain models for treegrab.

This module contains the immutable value types that describe a repository
snapshot as reported by the GitHub ``git/trees`` API.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List
from urllib.parse import quote


class TreeEntryKind(Enum):
    """Kind of an entry in a git tree."""

    BLOB = "blob"       # File with retrievable content
    TREE = "tree"       # Directory with children


@dataclass(frozen=True)
class RepoRef:
    """Immutable address of one repository snapshot (branch, tag or tree SHA)."""

    owner: str
    repo: str
    ref: str

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("Repository owner and name are required")
        if not self.ref:
            raise ValueError("A branch name or tree SHA is required")

    @property
    def display_name(self) -> str:
        return f'{self.owner}/{self.repo}@{self.ref}'

    def with_ref(self, ref: str) -> RepoRef:
        """Return a reference to the same repository at a different ref."""
        return replace(self, ref=ref)

    def tree_url(self, base_url: str) -> str:
        # Branch names may contain '#', '?' or '%'
        ref = quote(self.ref, safe='/')
        return f"{base_url.rstrip('/')}/repos/{self.owner}/{self.repo}/git/trees/{ref}"


@dataclass(frozen=True)
class FlatEntry:
    """One entry of a flat tree listing."""

    path: str
    mode: str
    kind: TreeEntryKind
    sha: str
    url: str
    size: int = 0  # Always 0 for trees

    @property
    def parent_path(self) -> str:
        """Path of the containing directory, '' for entries at the root."""
        head, _, _ = self.path.rpartition('/')
        return head


@dataclass(frozen=True)
class TreeListing:
    """A flat listing of a repository snapshot plus its root metadata."""

    sha: str
    url: str
    entries: List[FlatEntry] = field(default_factory=list)
    truncated: bool = False


__all__ = [
    "TreeEntryKind",
    "RepoRef",
    "FlatEntry",
    "TreeListing",
]
