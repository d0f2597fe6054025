from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform resolution of the per-user data directory (home of
the persisted configuration and optional log file) and path normalisation
for user-supplied manifest locations.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "PathManifest"
UNIX_APP_DIR_NAME = ".pathmanifest"
DATA_DIR_ENV_VAR = "PATHMANIFEST_HOME"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - $PATHMANIFEST_HOME when set
    - Windows: %LOCALAPPDATA%/PathManifest
    - Linux/Mac: ~/.pathmanifest

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = os.environ.get(DATA_DIR_ENV_VAR, "").strip()

    # Windows specific resolution
    if not path and os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str = "") -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Returns the fallback untouched if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Value returned when no path is given.

    Returns:
        str: Normalized absolute path, or the fallback.
    """
    p = (path or "").strip()
    if not p:
        return fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))
