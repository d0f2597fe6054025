from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema (global options plus one
sub-command per index query) and translates the parsed namespace into
configuration overrides.
"""

import argparse
from typing import Any, Dict

from pathmanifest.core.index.predicates import SEARCH_MODES
from pathmanifest.core.manifest.loader import DUPLICATE_POLICIES, EXPORT_FORMATS

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the pathmanifest CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="pathmanifest",
        description="Query a flat (path, line count) manifest as a directory tree.",
    )

    # --- Input ---
    p.add_argument(
        "-m", "--manifest",
        dest="manifest_path",
        default=None,
        help="Manifest file (JSON list or 'var files = [...]' script).",
    )
    p.add_argument(
        "--delimiter",
        default=None,
        help="Path segment delimiter (default '/').",
    )
    p.add_argument(
        "--on-duplicate",
        dest="on_duplicate",
        choices=DUPLICATE_POLICIES,
        default=None,
        help="How repeated manifest paths are handled.",
    )

    # --- Output ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print machine-readable JSON.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the stored configuration.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the resolved configuration and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Store the resolved configuration for later runs.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Commands ---
    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("stats", help="File, directory, line and depth totals.")

    ls = sub.add_parser("ls", help="List one directory level.")
    ls.add_argument("path", nargs="?", default="", help="Directory (root if omitted).")

    total = sub.add_parser("total", help="Aggregate line count of a path.")
    total.add_argument("path", nargs="?", default="", help="File or directory (root if omitted).")

    show = sub.add_parser("show", help="Show a single file entry.")
    show.add_argument("path", help="File path.")

    find = sub.add_parser("find", help="Search file paths.")
    find.add_argument("pattern", help="Text, glob or regex, depending on --mode.")
    find.add_argument("--mode", choices=SEARCH_MODES, default=None, help="Matching strategy.")
    find.add_argument("-i", "--ignore-case", action="store_true", help="Case-insensitive matching.")
    find.add_argument("--limit", type=int, default=0, help="Stop after N matches (0 = all).")

    tree = sub.add_parser("tree", help="Render the directory tree.")
    tree.add_argument("path", nargs="?", default="", help="Directory (root if omitted).")
    tree.add_argument("--depth", type=int, default=None, help="Levels to descend (0 = unlimited).")
    tree.add_argument("--no-lines", action="store_true", help="Hide line counts.")

    export = sub.add_parser("export", help="Re-emit the manifest.")
    export.add_argument("--format", dest="export_format", choices=EXPORT_FORMATS, default="json")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration override dictionary.

    Keys whose value is None are left for the merge step to skip.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "manifest_path": args.manifest_path,
        "delimiter": args.delimiter,
        "on_duplicate": args.on_duplicate,
        "search_mode": getattr(args, "mode", None),
        "tree_max_depth": getattr(args, "depth", None),
    }

    if getattr(args, "ignore_case", False):
        overrides["case_sensitive"] = False
    if getattr(args, "no_lines", False):
        overrides["show_line_counts"] = False
    if args.debug:
        overrides["log_level"] = "DEBUG"
    if args.log_file:
        overrides["save_log_file"] = True

    return overrides
