from __future__ import annotations

"""
Path Segment Utilities.

Converts caller-supplied paths (delimited strings or segment sequences) into
validated segment tuples and back.
"""

from typing import Optional, Sequence, Tuple, Union

from pathmanifest.domain.errors import MalformedPathError

PathInput = Union[str, Sequence[str]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def split_path(path: PathInput, delimiter: str) -> Tuple[str, ...]:
    """
    Normalise a path into a tuple of validated segments.

    Args:
        path: Delimited string or sequence of segments.
        delimiter: Segment separator used by string paths.

    Returns:
        Tuple[str, ...]: The path segments, root first.

    Raises:
        MalformedPathError: If the path is empty or has an empty segment.
    """
    if isinstance(path, str):
        segments: Tuple[str, ...] = tuple(path.split(delimiter)) if path else ()
    else:
        segments = tuple(path)

    validate_segments(segments, delimiter)
    return segments


def resolve_query_path(path: Optional[PathInput], delimiter: str) -> Tuple[str, ...]:
    """
    Like split_path, but None, "" and an empty sequence address the root.
    """
    if path is None:
        return ()
    if isinstance(path, str):
        if path == "":
            return ()
    elif len(path) == 0:
        return ()
    return split_path(path, delimiter)


def validate_segments(segments: Tuple[str, ...], delimiter: str) -> None:
    """Raise MalformedPathError unless every segment is a non-empty string."""
    if not segments:
        raise MalformedPathError("Path is empty.", path="")

    for seg in segments:
        if not isinstance(seg, str):
            raise MalformedPathError(
                f"Path segment must be a string, got {type(seg).__name__}.",
                path=_safe_join(segments, delimiter),
            )
        if not seg:
            raise MalformedPathError(
                "Path contains an empty segment.",
                path=_safe_join(segments, delimiter),
            )
        # A segment holding the delimiter could not be addressed by string paths
        if delimiter in seg:
            raise MalformedPathError(
                f"Path segment '{seg}' contains the delimiter '{delimiter}'.",
                path=_safe_join(segments, delimiter),
            )


def join_path(segments: Sequence[str], delimiter: str) -> str:
    """Join segments back into a delimited string."""
    return delimiter.join(segments)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _safe_join(segments: Sequence[object], delimiter: str) -> str:
    return delimiter.join(str(s) for s in segments)
