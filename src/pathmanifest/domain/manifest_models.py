from __future__ import annotations

"""
Path Manifest Data Models.

Provides the immutable records exchanged across the index boundary: the
input entries, the file views returned by lookups, the per-child listing
rows and the statistics snapshot.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Tuple

DEFAULT_DELIMITER = "/"

# -----------------------------------------------------------------------------
# INPUT RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Entry:
    """
    One (path, line count) record of a manifest.

    Attributes:
        path: Ordered path segments, root first.
        line_count: Number of source lines. Zero is a valid measurement.
    """
    path: Tuple[str, ...]
    line_count: int

    def __post_init__(self) -> None:
        # A bare string would be split into characters
        if isinstance(self.path, (str, bytes)):
            raise TypeError(
                f"Entry path must be a sequence of segments, got {type(self.path).__name__}; "
                f"use Entry.from_string() for delimited paths"
            )
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if isinstance(self.line_count, bool) or not isinstance(self.line_count, int):
            raise ValueError(f"line_count must be an int, got {type(self.line_count).__name__}")
        if self.line_count < 0:
            raise ValueError(f"line_count must be >= 0, got {self.line_count}")

    @classmethod
    def from_string(cls, text: str, line_count: int, delimiter: str = DEFAULT_DELIMITER) -> "Entry":
        """Split a delimited path string into an Entry. Segments are not validated here."""
        return cls(path=tuple(text.split(delimiter)) if text else (), line_count=line_count)

    def joined(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        return delimiter.join(self.path)

# -----------------------------------------------------------------------------
# QUERY RESULTS
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Kind of a tree node as reported by listings."""
    FILE = "file"
    DIRECTORY = "dir"


@dataclass(frozen=True)
class FileNode:
    """
    Read-only view of a leaf of the index.

    Attributes:
        entry: The manifest entry owned by the leaf.
    """
    entry: Entry

    @property
    def path(self) -> Tuple[str, ...]:
        return self.entry.path

    @property
    def name(self) -> str:
        return self.entry.path[-1]

    @property
    def self_lines(self) -> int:
        return self.entry.line_count


class ChildInfo(NamedTuple):
    """One row of a directory listing: (name, kind, aggregate or self lines)."""
    name: str
    kind: NodeKind
    lines: int


@dataclass(frozen=True)
class IndexStatistics:
    """
    Point-in-time snapshot of the whole index.

    Attributes:
        file_count: Number of leaves.
        dir_count: Number of directories, excluding the root.
        total_lines: Aggregate of the root.
        max_depth: Segment count of the deepest file (0 when empty).
    """
    file_count: int
    dir_count: int
    total_lines: int
    max_depth: int
