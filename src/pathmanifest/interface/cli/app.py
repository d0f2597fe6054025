from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: loading and merging of configuration sources
(defaults, persistent storage and CLI overrides), initialization of logging,
loading the manifest into an index, running the requested query and
rendering its result.
"""

import argparse
import itertools
import json
import os
import sys
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from pathmanifest.core.analysis.tree_renderer import render_index_tree, tree_to_dict
from pathmanifest.core.config_validator import validate_config
from pathmanifest.core.index.path_index import PathManifestIndex
from pathmanifest.core.index.predicates import build_predicate
from pathmanifest.core.manifest.loader import dump_manifest, load_index
from pathmanifest.domain.config import get_default_config, load_config, save_config
from pathmanifest.domain.errors import ManifestIndexError
from pathmanifest.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from pathmanifest.interface.cli import args as cli_args

logger = get_logger(__name__)

# Rendered command output: (JSON payload, human-readable lines)
CommandResult = Tuple[Any, List[str]]

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 unexpected failure, 2 usage or
             index error, 130 interrupted).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Resolve configuration hierarchy (defaults < stored < flags)
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    # 3. Logging bootstrap
    log_file = args.log_file or (get_default_log_path() if conf["save_log_file"] else None)
    configure_logging(LoggingConfig.from_settings(conf, log_file=log_file), force=True)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config:
        save_config(conf)

    if not args.command:
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    # 4. Pre-flight input verification
    manifest_path = conf["manifest_path"]
    if not manifest_path:
        print("ERROR: No manifest given. Use -m/--manifest or store one with --save-config.", file=sys.stderr)
        return EXIT_USAGE
    if not os.path.isfile(manifest_path):
        print(f"ERROR: Manifest not found: {manifest_path}", file=sys.stderr)
        return EXIT_USAGE

    # 5. Index construction and query execution
    try:
        index = load_index(manifest_path, delimiter=conf["delimiter"], on_duplicate=conf["on_duplicate"])
        payload, lines = _COMMANDS[args.command](index, args, conf)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return EXIT_INTERRUPTED
    except (ManifestIndexError, ValueError) as e:
        logger.debug(f"Command '{args.command}' failed: {e!r}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    except Exception as e:
        logger.critical(f"Unexpected failure: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # 6. Output rendering phase
    if args.json_output and args.command != "export":
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        for line in lines:
            print(line)

    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of non-None overrides into the base configuration.

    Only keys already present in the base are merged.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _cmd_stats(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    stats = index.statistics()
    lines = [
        f"Files: {stats.file_count}",
        f"Directories: {stats.dir_count}",
        f"Total lines: {stats.total_lines}",
        f"Max depth: {stats.max_depth}",
    ]
    return asdict(stats), lines


def _cmd_ls(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    children = index.list_children(_clean_path(args.path, index.delimiter))
    payload = [{"name": c.name, "kind": c.kind.value, "lines": c.lines} for c in children]
    lines = [f"{c.kind.value:<4} {c.lines:>8}  {c.name}" for c in children]
    return payload, lines


def _cmd_total(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    path = _clean_path(args.path, index.delimiter)
    total = index.total_lines(path)
    return {"path": path, "total_lines": total}, [str(total)]


def _cmd_show(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    node = index.lookup(args.path)
    path = node.entry.joined(index.delimiter)
    return {"path": path, "lines": node.self_lines}, [f"{path}\t{node.self_lines}"]


def _cmd_find(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    predicate = build_predicate(
        conf["search_mode"],
        args.pattern,
        delimiter=index.delimiter,
        case_sensitive=conf["case_sensitive"],
    )
    matches = index.search(predicate)
    if args.limit and args.limit > 0:
        matches = itertools.islice(matches, args.limit)
    paths = [index.delimiter.join(segments) for segments in matches]
    return paths, paths


def _cmd_tree(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    path = _clean_path(args.path, index.delimiter)
    lines = render_index_tree(
        index,
        path,
        show_line_counts=conf["show_line_counts"],
        max_depth=conf["tree_max_depth"],
    )
    return tree_to_dict(index, path, max_depth=conf["tree_max_depth"]), lines


def _cmd_export(index: PathManifestIndex, args: argparse.Namespace, conf: Dict[str, Any]) -> CommandResult:
    text = dump_manifest(index, fmt=args.export_format)
    return text, [text]


_COMMANDS: Dict[str, Callable[[PathManifestIndex, argparse.Namespace, Dict[str, Any]], CommandResult]] = {
    "stats": _cmd_stats,
    "ls": _cmd_ls,
    "total": _cmd_total,
    "show": _cmd_show,
    "find": _cmd_find,
    "tree": _cmd_tree,
    "export": _cmd_export,
}

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _clean_path(raw: str, delimiter: str) -> str:
    """Accept '.', a bare delimiter or a trailing delimiter for directory arguments."""
    p = (raw or "").strip()
    if p in (".", delimiter):
        return ""
    if p.endswith(delimiter):
        p = p[:-len(delimiter)]
    return p

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
