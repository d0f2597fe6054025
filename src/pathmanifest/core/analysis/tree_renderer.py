from __future__ import annotations

"""
Tree Renderer.

Converts a manifest index into a visual ASCII representation, keeping
insertion order and optionally annotating every node with its line count.
"""

from typing import Any, Dict, List, Optional, Tuple

from pathmanifest.core.index.path_index import PathManifestIndex
from pathmanifest.core.index.paths import PathInput, resolve_query_path
from pathmanifest.domain.manifest_models import NodeKind

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_index_tree(
        index: PathManifestIndex,
        dir_path: Optional[PathInput] = None,
        show_line_counts: bool = True,
        max_depth: int = 0,
) -> List[str]:
    """
    Render the subtree below dir_path as a list of lines.

    Args:
        index: Built index to render.
        dir_path: Directory to start from; None for the root.
        show_line_counts: Append '(N lines)' to every node.
        max_depth: Number of levels to descend; 0 for unlimited.

    Returns:
        List[str]: Visual lines of the tree, the starting directory first.
    """
    segments = resolve_query_path(dir_path, index.delimiter)
    header = index.delimiter.join(segments) + index.delimiter if segments else "."
    if show_line_counts:
        header += f" ({index.total_lines(segments)} lines)"

    lines: List[str] = [header]
    render_tree_structure(
        index, segments, lines, prefix="",
        show_line_counts=show_line_counts, max_depth=max_depth, depth=1,
    )
    return lines


def render_tree_structure(
        index: PathManifestIndex,
        segments: Tuple[str, ...],
        lines: List[str],
        prefix: str = "",
        show_line_counts: bool = True,
        max_depth: int = 0,
        depth: int = 1,
) -> None:
    """
    Recursively append one directory level to lines.

    Uses standard ASCII connectors (├──, └──) and manages indentation
    levels for nested directories.
    """
    children = index.list_children(segments)
    total = len(children)

    for i, child in enumerate(children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "

        label = child.name
        if child.kind is NodeKind.DIRECTORY:
            label += index.delimiter
        if show_line_counts:
            label += f" ({child.lines} lines)"
        lines.append(f"{prefix}{connector}{label}")

        if child.kind is NodeKind.DIRECTORY and (max_depth <= 0 or depth < max_depth):
            new_prefix = prefix + ("    " if is_last else "│   ")
            render_tree_structure(
                index,
                segments + (child.name,),
                lines,
                prefix=new_prefix,
                show_line_counts=show_line_counts,
                max_depth=max_depth,
                depth=depth + 1,
            )


def tree_to_dict(
        index: PathManifestIndex,
        dir_path: Optional[PathInput] = None,
        max_depth: int = 0,
) -> Dict[str, Any]:
    """
    Nested dictionary view of a subtree, for JSON presentation.

    Directories carry a 'children' list; directories cut off by max_depth
    carry an empty one.
    """
    segments = resolve_query_path(dir_path, index.delimiter)
    return {
        "name": index.delimiter.join(segments),
        "kind": NodeKind.DIRECTORY.value,
        "lines": index.total_lines(segments),
        "children": _children_to_dicts(index, segments, max_depth, 1),
    }


def _children_to_dicts(
        index: PathManifestIndex,
        segments: Tuple[str, ...],
        max_depth: int,
        depth: int,
) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for child in index.list_children(segments):
        node: Dict[str, Any] = {"name": child.name, "kind": child.kind.value, "lines": child.lines}
        if child.kind is NodeKind.DIRECTORY:
            descend = max_depth <= 0 or depth < max_depth
            node["children"] = (
                _children_to_dicts(index, segments + (child.name,), max_depth, depth + 1)
                if descend else []
            )
        out.append(node)
    return out
