from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the per-user data directory (config and log files).
3. Shared manifest fixtures used across unit and integration tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from pathmanifest.core.index.path_index import PathManifestIndex  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


# -----------------------------------------------------------------------------
# Environment Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user data directory at a per-test temporary folder."""
    data_dir = tmp_path / "pathmanifest_home"
    monkeypatch.setenv("PATHMANIFEST_HOME", str(data_dir))
    return data_dir


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_entries() -> List[Tuple[str, int]]:
    """The three-entry manifest used throughout the examples."""
    return [("a/b.zig", 10), ("a/c.zig", 5), ("d.zig", 3)]


@pytest.fixture
def sample_index(sample_entries: List[Tuple[str, int]]) -> PathManifestIndex:
    """A built index over sample_entries."""
    return PathManifestIndex.from_entries(sample_entries)


@pytest.fixture
def nested_entries() -> List[Tuple[str, int]]:
    """A deeper manifest in the shape of a standard library tree."""
    return [
        ("std.zig", 0),
        ("Build.zig", 40),
        ("Build/Cache.zig", 12),
        ("Build/Cache/DepTokenizer.zig", 7),
        ("Build/Step.zig", 20),
        ("Build/Step/Run.zig", 9),
        ("mem.zig", 30),
        ("mem/Allocator.zig", 11),
        ("os/linux/x86_64.zig", 2),
    ]


@pytest.fixture
def nested_index(nested_entries: List[Tuple[str, int]]) -> PathManifestIndex:
    return PathManifestIndex.from_entries(nested_entries)


@pytest.fixture
def original_manifest_path() -> Path:
    """The data-files.js table shipped with generated standard library docs."""
    return FIXTURES_DIR / "data-files.js"


@pytest.fixture
def manifest_file(tmp_path: Path, nested_entries: List[Tuple[str, int]]) -> Path:
    """nested_entries written in the 'var files = [...]' script form."""
    body = ",".join(f'["{p}",{n}]' for p, n in nested_entries)
    path = tmp_path / "data-files.js"
    path.write_text(f"var files =[{body}];", encoding="utf-8")
    return path


@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'pathmanifest.domain.config'.
    """
    return {
        "manifest_path": "/tmp/manifest.js",
        "delimiter": "/",
        "on_duplicate": "error",
        "search_mode": "substring",
        "case_sensitive": True,
        "tree_max_depth": 0,
        "show_line_counts": True,
        "log_level": "INFO",
        "save_log_file": False,
    }
