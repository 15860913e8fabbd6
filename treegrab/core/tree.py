"""
Assembly and traversal of repository trees.

All algorithms here use explicit stacks instead of call recursion so that
arbitrarily deep repositories cannot exhaust the interpreter stack.
"""

from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..infrastructure.error_handler import TreeAssemblyError
from ..models import FlatEntry, Tree, TreeEntryKind, TreeListing


ROOT_PATH = ""


def _freeze(
    nodes: Sequence[Tree],
    children_of: Sequence[List[int]],
    root: int = 0
) -> Tree:
    """
    Turn an arena of childless nodes plus child index lists into a Tree.

    Nodes are rebuilt children-first so every parent receives its finished
    children in their stored order.
    """
    order: List[int] = []
    stack = [root]
    while stack:
        index = stack.pop()
        order.append(index)
        stack.extend(children_of[index])

    built: Dict[int, Tree] = {}
    for index in reversed(order):
        node = nodes[index]
        kids = tuple(built.pop(child) for child in children_of[index])
        built[index] = Tree(
            path=node.path,
            mode=node.mode,
            sha=node.sha,
            kind=node.kind,
            size=node.size,
            url=node.url,
            children=kids
        )
    return built[root]


def assemble_tree(listing: TreeListing) -> Tree:
    """
    Build a hierarchical tree from a flat listing.

    Args:
        listing: Complete (non-truncated) flat listing

    Returns:
        Root Tree node carrying the listing's sha and url

    Raises:
        TreeAssemblyError: If an entry's parent directory is not in the listing
    """
    root = Tree(
        path=ROOT_PATH,
        mode="",
        sha=listing.sha,
        kind=TreeEntryKind.TREE,
        size=0,
        url=listing.url
    )
    nodes: List[Tree] = [root]
    children_of: List[List[int]] = [[]]
    dir_index: Dict[str, int] = {ROOT_PATH: 0}

    for entry in listing.entries:
        nodes.append(Tree.from_entry(entry))
        children_of.append([])
        if entry.kind is TreeEntryKind.TREE:
            dir_index[entry.path] = len(nodes) - 1

    for index, entry in enumerate(listing.entries, start=1):
        parent = dir_index.get(entry.parent_path)
        if parent is None:
            raise TreeAssemblyError(
                f"Entry {entry.path!r} has no directory entry for its parent "
                f"{entry.parent_path!r}"
            )
        children_of[parent].append(index)

    return _freeze(nodes, children_of)


def walk(tree: Tree) -> Iterator[Tree]:
    """
    Yield every node of ``tree`` in pre-order.

    Parents come before their descendants and children are visited in
    their stored order.
    """
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def resolve(tree: Tree, path: str, kind: Optional[TreeEntryKind] = None) -> Optional[Tree]:
    """
    Find the node at ``path`` by descending one segment at a time.

    Args:
        tree: Node to start from, usually the root
        path: Slash separated path relative to ``tree``
        kind: Required kind of the final node, or None for either

    Returns:
        The matching node, or None if a segment is missing or the kind differs
    """
    node = tree
    for segment in (part for part in path.split('/') if part):
        node = next((child for child in node.children if child.name == segment), None)
        if node is None:
            return None

    if kind is not None and node.kind is not kind:
        return None
    return node


def resolve_blob(tree: Tree, path: str) -> Optional[Tree]:
    return resolve(tree, path, TreeEntryKind.BLOB)


def resolve_tree(tree: Tree, path: str) -> Optional[Tree]:
    return resolve(tree, path, TreeEntryKind.TREE)


def resolve_any(tree: Tree, path: str) -> Optional[Tree]:
    return resolve(tree, path)


def prune(tree: Tree, predicate: Callable[[Tree], bool]) -> Tree:
    """
    Return a copy of ``tree`` keeping only children for which ``predicate`` holds.

    A rejected node drops its whole subtree. The root is always kept and the
    original tree is left untouched.
    """
    nodes: List[Tree] = []
    children_of: List[List[int]] = []
    stack: List[Tuple[Tree, int]] = [(tree, -1)]

    while stack:
        node, parent = stack.pop()
        index = len(nodes)
        nodes.append(node)
        children_of.append([])
        if parent >= 0:
            children_of[parent].append(index)
        for child in reversed(node.children):
            if predicate(child):
                stack.append((child, index))

    return _freeze(nodes, children_of)


def count_entries(entries: Iterable[FlatEntry]) -> Dict[TreeEntryKind, int]:
    counts = {kind: 0 for kind in TreeEntryKind}
    for entry in entries:
        counts[entry.kind] += 1
    return counts


__all__ = [
    "assemble_tree",
    "walk",
    "resolve",
    "resolve_blob",
    "resolve_tree",
    "resolve_any",
    "prune",
    "count_entries",
]
