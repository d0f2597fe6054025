from __future__ import annotations

"""
Path Manifest Error Hierarchy.

Defines the failure kinds raised by the manifest index and its loader.
All errors are local and synchronous; the index never retries internally.
"""

from typing import Optional

# -----------------------------------------------------------------------------
# BASE ERROR
# -----------------------------------------------------------------------------

class ManifestIndexError(Exception):
    """
    Root of every error raised by the manifest index subsystem.

    Attributes:
        path: Delimited form of the offending path, if one applies.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

# -----------------------------------------------------------------------------
# STRUCTURAL ERRORS
# -----------------------------------------------------------------------------

class DuplicatePathError(ManifestIndexError):
    """The same full path was supplied twice."""


class MalformedPathError(ManifestIndexError, ValueError):
    """The path is empty or contains an empty segment."""


class PathConflictError(ManifestIndexError):
    """A path claims to be both a file and a directory."""

# -----------------------------------------------------------------------------
# QUERY AND STATE ERRORS
# -----------------------------------------------------------------------------

class NotFoundError(ManifestIndexError, LookupError):
    """No node of the required kind exists at the path."""


class NotADirectoryError(ManifestIndexError):
    """A directory operation was requested on a file path."""


class NotInitializedError(ManifestIndexError):
    """The index has not been built yet."""

# -----------------------------------------------------------------------------
# INGESTION ERRORS
# -----------------------------------------------------------------------------

class ManifestFormatError(ManifestIndexError):
    """The manifest source could not be read or parsed."""
