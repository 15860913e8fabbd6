"""
Hierarchical tree model for treegrab.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .github import FlatEntry, TreeEntryKind


@dataclass(frozen=True)
class Tree:
    """
    Immutable node of a repository tree.

    The root node has kind TREE and an empty path. Children keep the order
    in which they appeared in the flat listing.
    """

    path: str
    mode: str
    sha: str
    kind: TreeEntryKind
    size: int
    url: str
    # Nodes compare and print by their own fields only
    children: Tuple[Tree, ...] = field(default_factory=tuple, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.path.rpartition('/')[2]

    @property
    def is_blob(self) -> bool:
        return self.kind is TreeEntryKind.BLOB

    @property
    def is_tree(self) -> bool:
        return self.kind is TreeEntryKind.TREE

    @classmethod
    def from_entry(cls, entry: FlatEntry, children: Tuple[Tree, ...] = ()) -> Tree:
        return cls(
            path=entry.path,
            mode=entry.mode,
            sha=entry.sha,
            kind=entry.kind,
            size=entry.size,
            url=entry.url,
            children=children
        )


__all__ = ["Tree"]
