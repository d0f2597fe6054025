from __future__ import annotations

"""
Hierarchical Path Manifest Index.

Turns a flat manifest of (path, line count) records into a directory tree
with per-directory line aggregates, and answers lookups, listings, totals,
searches and statistics over it. Nodes live in an arena addressed by integer
handles; each node keeps its parent handle so updates only walk the
ancestor chain.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from pathmanifest.core.index.locking import ReadWriteLock
from pathmanifest.core.index.paths import (
    PathInput,
    join_path,
    resolve_query_path,
    split_path,
)
from pathmanifest.domain.errors import (
    DuplicatePathError,
    ManifestIndexError,
    NotADirectoryError,
    NotFoundError,
    NotInitializedError,
    PathConflictError,
)
from pathmanifest.domain.manifest_models import (
    DEFAULT_DELIMITER,
    ChildInfo,
    Entry,
    FileNode,
    IndexStatistics,
    NodeKind,
)

logger = logging.getLogger(__name__)

ROOT_HANDLE = 0
_NO_PARENT = -1

SegmentPredicate = Callable[[Tuple[str, ...]], bool]

# -----------------------------------------------------------------------------
# INTERNAL NODE STORE
# -----------------------------------------------------------------------------

class _Node:
    """Arena slot. Directories carry children; files carry their entry."""

    __slots__ = ("name", "parent", "lines", "children", "entry")

    def __init__(self, name: str, parent: int, entry: Optional[Entry] = None):
        self.name = name
        self.parent = parent
        self.entry = entry
        self.lines = entry.line_count if entry is not None else 0
        self.children: Optional[Dict[str, int]] = None if entry is not None else {}

    @property
    def is_dir(self) -> bool:
        return self.children is not None


class _Arena:
    """Handle-addressed node storage with slot recycling."""

    __slots__ = ("nodes", "free", "file_count")

    def __init__(self) -> None:
        self.nodes: List[Optional[_Node]] = [_Node("", _NO_PARENT)]
        self.free: List[int] = []
        self.file_count = 0

    def alloc(self, node: _Node) -> int:
        if self.free:
            handle = self.free.pop()
            self.nodes[handle] = node
            return handle
        self.nodes.append(node)
        return len(self.nodes) - 1

    def release(self, handle: int) -> None:
        self.nodes[handle] = None
        self.free.append(handle)

    def get(self, handle: int) -> _Node:
        node = self.nodes[handle]
        if node is None:
            raise RuntimeError(f"Dangling node handle {handle}.")
        return node

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

class PathManifestIndex:
    """
    In-memory tree index over a path manifest.

    The index starts Unbuilt; every operation other than build() raises
    NotInitializedError until a build succeeds. Mutations take the write side
    of a readers/writer lock, eager queries take the read side.
    """

    def __init__(self, delimiter: str = DEFAULT_DELIMITER):
        if not isinstance(delimiter, str) or not delimiter:
            raise ValueError("delimiter must be a non-empty string")
        self._delimiter = delimiter
        self._arena: Optional[_Arena] = None
        self._lock = ReadWriteLock()
        self._generation = 0

    @classmethod
    def from_entries(
            cls,
            entries: Iterable[Any],
            delimiter: str = DEFAULT_DELIMITER,
    ) -> "PathManifestIndex":
        """Create and build an index in one step."""
        return cls(delimiter=delimiter).build(entries)

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def is_built(self) -> bool:
        return self._arena is not None

    # -------------------------------------------------------------------------
    # CONSTRUCTION
    # -------------------------------------------------------------------------

    def build(self, entries: Iterable[Any]) -> "PathManifestIndex":
        """
        Build the tree from a complete manifest, replacing any previous tree.

        The new tree is assembled off to the side and swapped in only once
        every entry has been placed and aggregated, so a failure leaves the
        index exactly as it was.

        Args:
            entries: Entry objects or (path, line_count) pairs.

        Returns:
            PathManifestIndex: self, for chaining.

        Raises:
            DuplicatePathError: A full path appears twice.
            MalformedPathError: A path is empty or has an empty segment.
            PathConflictError: A path is used both as a file and a directory.
        """
        arena = _Arena()
        try:
            for raw in entries:
                entry = self._coerce_entry(raw)
                self._attach(arena, entry)
        except ManifestIndexError as e:
            logger.debug(f"Build aborted, previous state kept: {e}")
            raise

        _aggregate_post_order(arena)

        with self._lock.write():
            self._arena = arena
            self._generation += 1

        logger.info(
            f"Manifest index built: {arena.file_count} files, "
            f"{arena.get(ROOT_HANDLE).lines} lines"
        )
        return self

    # -------------------------------------------------------------------------
    # INCREMENTAL UPDATES
    # -------------------------------------------------------------------------

    def insert(self, entry: Any) -> None:
        """
        Add one entry, updating aggregates along its ancestor chain only.

        All checks run before the tree is touched; a failed insert has no
        effect.
        """
        with self._lock.write():
            arena = self._require_built()
            entry = self._coerce_entry(entry)
            leaf = self._attach(arena, entry)
            _propagate(arena, arena.get(leaf).parent, entry.line_count)
            self._generation += 1

        logger.debug(f"Inserted '{entry.joined(self._delimiter)}' ({entry.line_count} lines)")

    def remove(self, path: PathInput) -> Entry:
        """
        Remove the file entry at path and prune directories left empty.

        Returns:
            Entry: The removed entry.

        Raises:
            NotFoundError: No file entry exists at path.
        """
        with self._lock.write():
            arena = self._require_built()
            segments = split_path(path, self._delimiter)
            handle = _resolve(arena, segments)
            if handle is None or arena.get(handle).is_dir:
                raise NotFoundError(
                    f"No file entry at '{join_path(segments, self._delimiter)}'.",
                    path=join_path(segments, self._delimiter),
                )

            node = arena.get(handle)
            entry = node.entry
            parent = node.parent
            _propagate(arena, parent, -node.lines)

            del arena.get(parent).children[node.name]
            arena.release(handle)
            arena.file_count -= 1

            # Prune directories emptied by the removal; the root always stays
            while parent != ROOT_HANDLE and not arena.get(parent).children:
                dir_node = arena.get(parent)
                grandparent = dir_node.parent
                del arena.get(grandparent).children[dir_node.name]
                arena.release(parent)
                parent = grandparent

            self._generation += 1

        logger.debug(f"Removed '{entry.joined(self._delimiter)}'")
        return entry

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def lookup(self, path: PathInput) -> FileNode:
        """Resolve an exact file path. Directories are reported as not found."""
        with self._lock.read():
            arena = self._require_built()
            segments = split_path(path, self._delimiter)
            handle = _resolve(arena, segments)
            if handle is None or arena.get(handle).is_dir:
                joined = join_path(segments, self._delimiter)
                raise NotFoundError(f"No file entry at '{joined}'.", path=joined)
            return FileNode(entry=arena.get(handle).entry)

    def contains(self, path: PathInput) -> bool:
        """True if a file entry exists at path."""
        with self._lock.read():
            arena = self._require_built()
            handle = _resolve(arena, split_path(path, self._delimiter))
            return handle is not None and not arena.get(handle).is_dir

    __contains__ = contains

    def list_children(self, dir_path: Optional[PathInput] = None) -> List[ChildInfo]:
        """
        List one level of a directory in insertion order.

        Args:
            dir_path: Directory to list; None or "" for the root.

        Returns:
            List[ChildInfo]: (name, kind, lines) rows, where lines is the
                             aggregate for directories and the own count for files.

        Raises:
            NotFoundError: The path does not resolve.
            NotADirectoryError: The path resolves to a file.
        """
        with self._lock.read():
            arena = self._require_built()
            segments = resolve_query_path(dir_path, self._delimiter)
            node = arena.get(self._require_node(arena, segments))
            if not node.is_dir:
                joined = join_path(segments, self._delimiter)
                raise NotADirectoryError(f"'{joined}' is a file.", path=joined)

            rows: List[ChildInfo] = []
            for name, child_handle in node.children.items():
                child = arena.get(child_handle)
                kind = NodeKind.DIRECTORY if child.is_dir else NodeKind.FILE
                rows.append(ChildInfo(name, kind, child.lines))
            return rows

    def total_lines(self, dir_path: Optional[PathInput] = None) -> int:
        """Aggregate line count of a node (the root by default)."""
        with self._lock.read():
            arena = self._require_built()
            segments = resolve_query_path(dir_path, self._delimiter)
            return arena.get(self._require_node(arena, segments)).lines

    def search(self, predicate: SegmentPredicate) -> Iterator[Tuple[str, ...]]:
        """
        Lazily yield the paths of files whose segments satisfy predicate.

        Traversal is depth-first with children in insertion order. Every call
        starts a fresh traversal. Resuming a search after the index has been
        mutated raises RuntimeError.
        """
        self._require_built()
        return (segments for segments, _ in self._walk_files(predicate))

    def iter_entries(self) -> Iterator[Entry]:
        """Lazily yield every entry in the same order as search()."""
        self._require_built()
        return (entry for _, entry in self._walk_files(None))

    def statistics(self) -> IndexStatistics:
        """Compute a snapshot of counts and depth in a single traversal."""
        with self._lock.read():
            arena = self._require_built()
            file_count = dir_count = max_depth = 0
            stack: List[Tuple[int, int]] = [(ROOT_HANDLE, 0)]
            while stack:
                handle, depth = stack.pop()
                node = arena.get(handle)
                if node.is_dir:
                    if handle != ROOT_HANDLE:
                        dir_count += 1
                    stack.extend((child, depth + 1) for child in node.children.values())
                else:
                    file_count += 1
                    max_depth = max(max_depth, depth)

            return IndexStatistics(
                file_count=file_count,
                dir_count=dir_count,
                total_lines=arena.get(ROOT_HANDLE).lines,
                max_depth=max_depth,
            )

    def __len__(self) -> int:
        return self._require_built().file_count

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _require_built(self) -> _Arena:
        arena = self._arena
        if arena is None:
            raise NotInitializedError("Index has not been built.")
        return arena

    def _require_node(self, arena: _Arena, segments: Tuple[str, ...]) -> int:
        handle = _resolve(arena, segments)
        if handle is None:
            joined = join_path(segments, self._delimiter)
            raise NotFoundError(f"Path '{joined}' not found.", path=joined)
        return handle

    def _coerce_entry(self, raw: Any) -> Entry:
        """Accept an Entry or a (path, line_count) pair and validate its path."""
        if isinstance(raw, Entry):
            segments = split_path(raw.path, self._delimiter)
            return raw if segments == raw.path else Entry(segments, raw.line_count)

        try:
            path, line_count = raw
        except (TypeError, ValueError):
            raise TypeError(
                f"Expected an Entry or a (path, line_count) pair, got {raw!r}."
            ) from None
        return Entry(split_path(path, self._delimiter), line_count)

    def _attach(self, arena: _Arena, entry: Entry) -> int:
        """
        Place entry in the tree without touching aggregates.

        Conflicts are detected by a read-only walk first, so nothing is
        created when the entry is rejected.

        Returns:
            int: Handle of the new leaf.
        """
        handle, created_from = self._plan_attach(arena, entry)

        for seg in entry.path[created_from:-1]:
            child = arena.alloc(_Node(seg, handle))
            arena.get(handle).children[seg] = child
            handle = child

        leaf = arena.alloc(_Node(entry.path[-1], handle, entry))
        arena.get(handle).children[entry.path[-1]] = leaf
        arena.file_count += 1
        return leaf

    def _plan_attach(self, arena: _Arena, entry: Entry) -> Tuple[int, int]:
        """
        Walk the existing tree along entry.path.

        Returns:
            Tuple[int, int]: Deepest existing directory handle on the path and
                             the index of the first segment still to create.
        """
        handle = ROOT_HANDLE
        for depth, seg in enumerate(entry.path[:-1]):
            child = arena.get(handle).children.get(seg)
            if child is None:
                return handle, depth
            if not arena.get(child).is_dir:
                prefix = join_path(entry.path[:depth + 1], self._delimiter)
                raise PathConflictError(
                    f"'{prefix}' is a file and cannot contain "
                    f"'{entry.joined(self._delimiter)}'.",
                    path=entry.joined(self._delimiter),
                )
            handle = child

        existing = arena.get(handle).children.get(entry.path[-1])
        if existing is not None:
            joined = entry.joined(self._delimiter)
            if arena.get(existing).is_dir:
                raise PathConflictError(f"'{joined}' is already a directory.", path=joined)
            raise DuplicatePathError(f"Duplicate path '{joined}'.", path=joined)

        return handle, len(entry.path) - 1

    def _walk_files(
            self,
            predicate: Optional[SegmentPredicate],
    ) -> Iterator[Tuple[Tuple[str, ...], Entry]]:
        """
        Depth-first generator over file leaves.

        The read lock is held only while advancing to the next match, never
        across a yield.
        """
        # Tree and generation must come from the same snapshot
        with self._lock.read():
            arena = self._require_built()
            generation = self._generation
        stack: List[Tuple[int, Tuple[str, ...]]] = [(ROOT_HANDLE, ())]

        while True:
            found: Optional[Tuple[Tuple[str, ...], Entry]] = None
            with self._lock.read():
                if self._generation != generation:
                    raise RuntimeError("Index was modified during iteration.")
                while stack and found is None:
                    handle, segments = stack.pop()
                    node = arena.get(handle)
                    if node.is_dir:
                        for name, child in reversed(list(node.children.items())):
                            stack.append((child, segments + (name,)))
                    elif predicate is None or predicate(segments):
                        found = (segments, node.entry)

            if found is None:
                return
            yield found

# -----------------------------------------------------------------------------
# TREE ALGORITHMS
# -----------------------------------------------------------------------------

def _resolve(arena: _Arena, segments: Tuple[str, ...]) -> Optional[int]:
    """Follow segments from the root; None if a step is missing or passes through a file."""
    handle = ROOT_HANDLE
    for seg in segments:
        children = arena.get(handle).children
        if children is None:
            return None
        child = children.get(seg)
        if child is None:
            return None
        handle = child
    return handle


def _propagate(arena: _Arena, handle: int, delta: int) -> None:
    """Add delta to every directory from handle up to the root."""
    while handle != _NO_PARENT:
        node = arena.get(handle)
        node.lines += delta
        handle = node.parent


def _aggregate_post_order(arena: _Arena) -> None:
    """Recompute every directory aggregate bottom-up in one pass."""
    stack: List[Tuple[int, bool]] = [(ROOT_HANDLE, False)]
    while stack:
        handle, children_done = stack.pop()
        node = arena.get(handle)
        if not node.is_dir:
            continue
        if children_done:
            node.lines = sum(arena.get(child).lines for child in node.children.values())
        else:
            stack.append((handle, True))
            stack.extend((child, False) for child in node.children.values())
