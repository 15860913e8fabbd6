"""
Tests for converting git/trees payloads into TreeListing values.
"""

from typing import Dict, List

import pytest

from treegrab.infrastructure.error_handler import DecodeError
from treegrab.models import TreeEntryKind
from treegrab.services.github_api import parse_tree_listing


def entry(path: str, kind: str, sha: str, size: int = 0) -> Dict:
    item = {"path": path, "mode": "100644" if kind == "blob" else "040000",
            "type": kind, "sha": sha, "url": f"https://api.github.com/{kind}s/{sha}"}
    if kind == "blob":
        item["size"] = size
    return item


def listing(sha: str, entries: List[Dict], truncated: bool = False) -> Dict:
    return {"sha": sha, "url": f"https://api.github.com/trees/{sha}", "tree": entries, "truncated": truncated}


def test_parse_listing_fields():
    result = parse_tree_listing(listing("root-sha", [entry("a.txt", "blob", "b-a", 3)], truncated=True))

    assert result.sha == "root-sha"
    assert result.url == "https://api.github.com/trees/root-sha"
    assert result.truncated is True
    only = result.entries[0]
    assert (only.path, only.mode, only.kind, only.sha, only.size) == (
        "a.txt", "100644", TreeEntryKind.BLOB, "b-a", 3
    )
    assert only.url == "https://api.github.com/blobs/b-a"


def test_parse_listing_skips_submodules():
    payload = listing("root-sha", [
        entry("lib", "tree", "t-lib"),
        {"path": "vendor/dep", "mode": "160000", "type": "commit", "sha": "c-dep"},
        entry("a.txt", "blob", "b-a", 3),
    ])

    result = parse_tree_listing(payload)

    assert [(e.path, e.kind) for e in result.entries] == [
        ("lib", TreeEntryKind.TREE), ("a.txt", TreeEntryKind.BLOB),
    ]
    assert result.entries[0].size == 0
    assert result.entries[1].size == 3


def test_parse_listing_rejects_unknown_type():
    payload = listing("root-sha", [{"path": "x", "mode": "1", "type": "symlink", "sha": "s", "url": "u"}])

    with pytest.raises(DecodeError):
        parse_tree_listing(payload)


def test_parse_listing_missing_fields():
    with pytest.raises(DecodeError):
        parse_tree_listing({"sha": "root-sha"})
    with pytest.raises(DecodeError):
        parse_tree_listing(listing("root-sha", [{"path": "x", "type": "blob"}]))



