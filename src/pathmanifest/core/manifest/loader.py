from __future__ import annotations

"""
Manifest Ingestion and Re-emission.

Reads the flat (path, line count) table produced by documentation
generators, either as the JavaScript assignment they emit
(`var files =[["std.zig",0], ...];`) or as plain JSON, and writes an index
back out in either form.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Tuple

from pathmanifest.core.index.path_index import PathManifestIndex
from pathmanifest.domain.errors import ManifestFormatError
from pathmanifest.domain.manifest_models import DEFAULT_DELIMITER

logger = logging.getLogger(__name__)

DEFAULT_VAR_NAME = "files"
EXPORT_FORMATS: List[str] = ["json", "js"]
DUPLICATE_POLICIES: List[str] = ["error", "first", "last"]

_JS_ASSIGNMENT_RX = re.compile(
    r"^\s*(?:var|let|const)\s+[A-Za-z_$][\w$]*\s*=\s*(?P<payload>.*?)\s*;?\s*$",
    re.DOTALL,
)

# -----------------------------------------------------------------------------
# PARSING
# -----------------------------------------------------------------------------

def parse_manifest(text: str) -> List[Tuple[str, int]]:
    """
    Parse manifest text into (path, line_count) records, preserving order.

    Accepted shapes:
        - `var files = [["a/b.zig", 10], ...];`
        - `[["a/b.zig", 10], ...]`
        - `[{"path": "a/b.zig", "lines": 10}, ...]`

    Raises:
        ManifestFormatError: If the text is not a manifest of either shape.
    """
    payload = text
    m = _JS_ASSIGNMENT_RX.match(text)
    if m:
        payload = m.group("payload")

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ManifestFormatError(f"Manifest is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ManifestFormatError(
            f"Manifest must be a list of records, got {type(data).__name__}."
        )

    return [_parse_record(i, rec) for i, rec in enumerate(data)]


def load_manifest(path: str) -> List[Tuple[str, int]]:
    """
    Read and parse a manifest file (UTF-8).

    Raises:
        ManifestFormatError: If the file cannot be read or parsed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ManifestFormatError(f"Cannot read manifest '{path}': {e}", path=path) from e

    try:
        records = parse_manifest(text)
    except ManifestFormatError as e:
        raise ManifestFormatError(f"{os.path.basename(path)}: {e}", path=path) from e

    logger.info(f"Loaded {len(records)} manifest records from {path}")
    return records


def dedupe_records(
        records: List[Tuple[str, int]],
        policy: str = "error",
) -> List[Tuple[str, int]]:
    """
    Resolve repeated paths before the records reach the index.

    Args:
        records: Parsed (path, line_count) records.
        policy: 'error' leaves records untouched so the index rejects them,
                'first' keeps the first occurrence, 'last' keeps the count of
                the last occurrence at the position of the first.

    Raises:
        ValueError: Unknown policy.
    """
    if policy not in DUPLICATE_POLICIES:
        raise ValueError(
            f"Unknown duplicate policy '{policy}'. Expected one of: {', '.join(DUPLICATE_POLICIES)}."
        )
    if policy == "error":
        return list(records)

    positions: Dict[str, int] = {}
    out: List[Tuple[str, int]] = []
    for path, count in records:
        if path not in positions:
            positions[path] = len(out)
            out.append((path, count))
            continue
        logger.warning(f"Duplicate manifest path '{path}' resolved by policy '{policy}'")
        if policy == "last":
            out[positions[path]] = (path, count)
    return out


def load_index(
        path: str,
        delimiter: str = DEFAULT_DELIMITER,
        on_duplicate: str = "error",
) -> PathManifestIndex:
    """Read a manifest file and build an index over it."""
    records = dedupe_records(load_manifest(path), on_duplicate)
    return PathManifestIndex.from_entries(records, delimiter=delimiter)

# -----------------------------------------------------------------------------
# RE-EMISSION
# -----------------------------------------------------------------------------

def dump_manifest(
        index: PathManifestIndex,
        fmt: str = "json",
        var_name: str = DEFAULT_VAR_NAME,
) -> str:
    """
    Serialise an index back into manifest text, in depth-first order.

    Args:
        index: Built index to export.
        fmt: 'json' for a bare list, 'js' for a `var <name> = [...];` assignment.
        var_name: Variable name used by the 'js' format.

    Raises:
        ValueError: Unknown format.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown manifest format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}.")

    rows = [[entry.joined(index.delimiter), entry.line_count] for entry in index.iter_entries()]
    body = json.dumps(rows, ensure_ascii=False, separators=(",", ":"))

    if fmt == "js":
        return f"var {var_name} ={body};"
    return body

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse_record(position: int, rec: Any) -> Tuple[str, int]:
    """Validate the shape of one record; structural path checks are left to the index."""
    if isinstance(rec, dict):
        path = rec.get("path")
        count = rec.get("lines", rec.get("line_count"))
    elif isinstance(rec, list) and len(rec) == 2:
        path, count = rec
    else:
        raise ManifestFormatError(f"Record #{position} must be a [path, lines] pair: {rec!r}")

    if not isinstance(path, str):
        raise ManifestFormatError(f"Record #{position} has a non-string path: {path!r}")
    if isinstance(count, bool) or not isinstance(count, int):
        raise ManifestFormatError(f"Record #{position} has a non-integer line count: {count!r}", path=path)
    if count < 0:
        raise ManifestFormatError(f"Record #{position} has a negative line count: {count}", path=path)

    return path, count
