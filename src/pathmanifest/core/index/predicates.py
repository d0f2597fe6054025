from __future__ import annotations

"""
Search Predicate Factories.

Builds the callables accepted by PathManifestIndex.search(). Every predicate
receives the path segments of one file and decides whether it matches.
"""

import fnmatch
import re
from typing import Callable, Dict, List, Tuple

from pathmanifest.domain.manifest_models import DEFAULT_DELIMITER

SegmentPredicate = Callable[[Tuple[str, ...]], bool]

SEARCH_MODES: List[str] = ["substring", "prefix", "glob", "regex", "basename"]

# -----------------------------------------------------------------------------
# PREDICATE FACTORIES
# -----------------------------------------------------------------------------

def prefix(text: str, delimiter: str = DEFAULT_DELIMITER, case_sensitive: bool = True) -> SegmentPredicate:
    """Match files whose joined path starts with text."""
    needle = _fold(text, case_sensitive)

    def _match(segments: Tuple[str, ...]) -> bool:
        return _fold(delimiter.join(segments), case_sensitive).startswith(needle)

    return _match


def substring(text: str, delimiter: str = DEFAULT_DELIMITER, case_sensitive: bool = True) -> SegmentPredicate:
    """Match files whose joined path contains text."""
    needle = _fold(text, case_sensitive)

    def _match(segments: Tuple[str, ...]) -> bool:
        return needle in _fold(delimiter.join(segments), case_sensitive)

    return _match


def glob(pattern: str, delimiter: str = DEFAULT_DELIMITER, case_sensitive: bool = True) -> SegmentPredicate:
    """
    Match files whose joined path satisfies a shell-style pattern.

    '*' also crosses delimiters, as with fnmatch.
    """
    rx = re.compile(fnmatch.translate(pattern), 0 if case_sensitive else re.IGNORECASE)

    def _match(segments: Tuple[str, ...]) -> bool:
        return rx.match(delimiter.join(segments)) is not None

    return _match


def regex(pattern: str, delimiter: str = DEFAULT_DELIMITER, case_sensitive: bool = True) -> SegmentPredicate:
    """
    Match files whose joined path contains a match of a regular expression.

    Raises:
        ValueError: If the pattern does not compile.
    """
    try:
        rx = re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
    except re.error as e:
        raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e

    def _match(segments: Tuple[str, ...]) -> bool:
        return rx.search(delimiter.join(segments)) is not None

    return _match


def basename(name: str, delimiter: str = DEFAULT_DELIMITER, case_sensitive: bool = True) -> SegmentPredicate:
    """Match files whose last segment equals name."""
    needle = _fold(name, case_sensitive)

    def _match(segments: Tuple[str, ...]) -> bool:
        return bool(segments) and _fold(segments[-1], case_sensitive) == needle

    return _match


_FACTORIES: Dict[str, Callable[..., SegmentPredicate]] = {
    "substring": substring,
    "prefix": prefix,
    "glob": glob,
    "regex": regex,
    "basename": basename,
}


def build_predicate(
        mode: str,
        pattern: str,
        delimiter: str = DEFAULT_DELIMITER,
        case_sensitive: bool = True,
) -> SegmentPredicate:
    """
    Dispatch to the factory registered for a search mode.

    Raises:
        ValueError: Unknown mode or invalid pattern.
    """
    factory = _FACTORIES.get((mode or "").strip().lower())
    if factory is None:
        raise ValueError(f"Unknown search mode '{mode}'. Expected one of: {', '.join(SEARCH_MODES)}.")
    return factory(pattern, delimiter=delimiter, case_sensitive=case_sensitive)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _fold(text: str, case_sensitive: bool) -> str:
    return text if case_sensitive else text.casefold()
