"""
Path glob filtering for repository trees.

Glob syntax:

- ``*`` matches any run of characters within one path segment
- ``?`` matches a single character within one path segment
- ``**`` as a whole segment matches any number of segments, including none
- ``[abc]`` / ``[!abc]`` match a character class
- ``{a,b}`` matches either alternative
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Sequence

from ..models import FilterSpec, Tree


####
##      GLOB TRANSLATION
#####
def _split_alternatives(body: str) -> List[str]:
    """Split the inside of a ``{...}`` group on top-level commas."""

    alternatives, depth, start = [], 0, 0
    for index, char in enumerate(body):
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
        elif char == ',' and depth == 0:
            alternatives.append(body[start:index])
            start = index + 1
    alternatives.append(body[start:])
    return alternatives


def _find_closing_brace(pattern: str, start: int) -> int:
    depth = 0
    for index in range(start, len(pattern)):
        if pattern[index] == '{':
            depth += 1
        elif pattern[index] == '}':
            depth -= 1
            if depth == 0:
                return index
    return -1


def translate_glob(pattern: str) -> str:
    """
    Translate a glob pattern into an equivalent regular expression.

    Args:
        pattern: Glob pattern using ``/`` as the path separator

    Returns:
        Regular expression source meant to be used with ``fullmatch``
    """
    parts: List[str] = []
    index, length = 0, len(pattern)

    while index < length:
        char = pattern[index]

        if char == '*':
            end = index
            while end < length and pattern[end] == '*':
                end += 1

            whole_segment = (
                end - index >= 2
                and (index == 0 or pattern[index - 1] == '/')
                and (end == length or pattern[end] == '/')
            )
            if not whole_segment:
                parts.append('[^/]*')
                index = end
            elif end == length:
                parts.append('.*')
                index = end
            else:
                # '**/' also matches zero leading directories
                parts.append('(?:.*/)?')
                index = end + 1

        elif char == '?':
            parts.append('[^/]')
            index += 1

        elif char == '[':
            end = pattern.find(']', index + 2)
            if end == -1:
                parts.append(re.escape(char))
                index += 1
                continue
            body = pattern[index + 1:end]
            if body[0] in '!^':
                body = '^' + body[1:]
            parts.append('[' + body.replace('\\', '\\\\') + ']')
            index = end + 1

        elif char == '{':
            end = _find_closing_brace(pattern, index)
            if end == -1:
                parts.append(re.escape(char))
                index += 1
                continue
            alternatives = _split_alternatives(pattern[index + 1:end])
            parts.append('(?:' + '|'.join(translate_glob(alt) for alt in alternatives) + ')')
            index = end + 1

        elif char == '\\' and index + 1 < length:
            parts.append(re.escape(pattern[index + 1]))
            index += 2

        else:
            parts.append(re.escape(char))
            index += 1

    return ''.join(parts)


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> "re.Pattern[str]":
    return re.compile(translate_glob(pattern), re.DOTALL)


def glob_match(pattern: str, path: str) -> bool:
    return compile_glob(pattern).fullmatch(path) is not None


####
##      FILTER RESULT MODEL
#####
@dataclass
class FilterResult:
    """Outcome of filtering a sequence of tree nodes."""

    included_files: List[Tree] = field(default_factory=list)
    excluded_files: List[Tree] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.included_files) + len(self.excluded_files)

    @property
    def filtered_files(self) -> int:
        return len(self.included_files)


####
##      FILTER ENGINE
#####
class FilterEngine:
    """Applies a FilterSpec to paths and tree nodes."""

    def __init__(self, spec: FilterSpec):
        self.spec = spec

    @staticmethod
    def _matches_any(patterns: Sequence[str], path: str) -> bool:
        return any(glob_match(pattern, path) for pattern in patterns)

    def check(self, path: str) -> bool:
        """Return whether ``path`` passes both the include and exclude gates."""

        if self.spec.included and not self._matches_any(self.spec.included, path):
            return False

        if self.spec.excluded and self._matches_any(self.spec.excluded, path):
            return False

        return True

    def should_include_file(self, node: Tree) -> bool:
        """Only blobs are downloadable; trees never pass."""
        return node.is_blob and self.check(node.path)

    def filter_files(self, nodes: Iterable[Tree]) -> FilterResult:
        """
        Split nodes into included and excluded lists, preserving order.

        Args:
            nodes: Tree nodes, typically from ``walk``

        Returns:
            FilterResult with the selected blobs and everything else
        """
        result = FilterResult()
        for node in nodes:
            if self.should_include_file(node):
                result.included_files.append(node)
            else:
                result.excluded_files.append(node)
        return result


__all__ = [
    "FilterEngine",
    "FilterResult",
    "translate_glob",
    "compile_glob",
    "glob_match",
]
