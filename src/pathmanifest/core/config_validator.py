from __future__ import annotations

"""
Configuration Validation Service.

Ensures that configuration dictionaries coming from disk or the command line
conform to the expected schema. Handles type coercion, choice checking,
path normalisation and default value injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from pathmanifest.core.index.predicates import SEARCH_MODES
from pathmanifest.core.manifest.loader import DUPLICATE_POLICIES
from pathmanifest.domain.config import get_default_config
from pathmanifest.infra.fs import normalize_path
from pathmanifest.infra.logging.config import LOG_LEVELS

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a
                                          list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    unknown = sorted(k for k in config if k not in defaults)
    if unknown:
        warnings.append(f"Unknown keys ignored: {', '.join(unknown)}.")

    # 2. Schema Definition (Declarative mapping)
    choice_fields = {
        "search_mode": SEARCH_MODES,
        "on_duplicate": DUPLICATE_POLICIES,
        "log_level": LOG_LEVELS,
    }
    bool_fields = ["case_sensitive", "show_line_counts", "save_log_file"]

    # 3. Field Processing & Normalization
    for field, choices in choice_fields.items():
        merged[field] = _as_choice(merged.get(field), defaults[field], choices, field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["tree_max_depth"] = _as_non_negative_int(
        merged.get("tree_max_depth"), defaults["tree_max_depth"], "tree_max_depth", warnings, strict
    )
    merged["delimiter"] = _as_delimiter(merged.get("delimiter"), defaults["delimiter"], warnings, strict)

    manifest_path = merged.get("manifest_path")
    if manifest_path is not None and not isinstance(manifest_path, str):
        msg = f"Invalid field 'manifest_path': expected str, received {type(manifest_path).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        manifest_path = defaults["manifest_path"]
    merged["manifest_path"] = normalize_path(manifest_path, defaults["manifest_path"])

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_choice(
        value: Any,
        fallback: str,
        choices: List[str],
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Accept a case-insensitive member of choices, in its canonical spelling."""
    if value is None:
        return fallback
    if isinstance(value, str):
        for choice in choices:
            if value.strip().lower() == choice.lower():
                return choice

    msg = f"Invalid field '{field}': {value!r} is not one of {', '.join(choices)}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        # Support numeric coercion (0/1)
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        # Support string coercion (human-friendly keywords)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_non_negative_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Accept ints >= 0; numeric strings are converted when not strict."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value

    if not strict and isinstance(value, str) and value.strip().isdigit():
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        return int(value.strip())

    msg = f"Invalid field '{field}': expected non-negative int, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_delimiter(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """Delimiters are taken verbatim; only empty or non-string values are rejected."""
    if value is None:
        return fallback
    if isinstance(value, str) and value:
        return value

    msg = f"Invalid field 'delimiter': expected non-empty str, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
