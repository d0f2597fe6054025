from __future__ import annotations

"""
Integration tests for the CLI Application Controller.

Runs the controller in-process against manifest files on disk and checks
exit codes, rendered output and configuration persistence.
"""

import json
from pathlib import Path
from typing import List

import pytest

from pathmanifest.infra.logging import shutdown_logging
from pathmanifest.interface.cli.app import main


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    yield
    shutdown_logging()


def run(argv: List[str], capsys: pytest.CaptureFixture[str]):
    code = main(argv)
    out, err = capsys.readouterr()
    return code, out, err


# -----------------------------------------------------------------------------
# QUERY COMMANDS
# -----------------------------------------------------------------------------

def test_stats(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "stats"], capsys)
    assert code == 0
    assert out.splitlines() == ["Files: 9", "Directories: 6", "Total lines: 131", "Max depth: 3"]


def test_stats_json(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "--json", "stats"], capsys)
    assert code == 0
    assert json.loads(out) == {"file_count": 9, "dir_count": 6, "total_lines": 131, "max_depth": 3}


def test_ls_root(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "ls"], capsys)
    assert code == 0
    rows = [line.split() for line in out.splitlines()]
    assert [r[2] for r in rows] == ["std.zig", "Build.zig", "Build", "mem.zig", "mem", "os"]
    assert rows[2] == ["dir", "48", "Build"]


def test_ls_json_subdir(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "--json", "ls", "Build/"], capsys)
    assert code == 0
    assert json.loads(out)[0] == {"name": "Cache.zig", "kind": "file", "lines": 12}


@pytest.mark.parametrize("path, expected", [("", "131"), (".", "131"), ("Build", "48"), ("Build/", "48"), ("mem.zig", "30")])
def test_total(manifest_file: Path, capsys, path: str, expected: str) -> None:
    argv = ["-m", str(manifest_file), "total"] + ([path] if path else [])
    code, out, _ = run(argv, capsys)
    assert code == 0
    assert out.strip() == expected


def test_show_file(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "show", "Build/Step.zig"], capsys)
    assert code == 0
    assert out.strip() == "Build/Step.zig\t20"


@pytest.mark.parametrize("argv", [["show", "Build"], ["show", "nope.zig"], ["ls", "mem.zig"], ["total", "nope"]])
def test_index_errors_exit_usage(manifest_file: Path, capsys, argv: List[str]) -> None:
    code, out, err = run(["-m", str(manifest_file)] + argv, capsys)
    assert code == 2
    assert out == ""
    assert "ERROR:" in err


def test_find_substring(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "find", "Step"], capsys)
    assert code == 0
    assert out.splitlines() == ["Build/Step.zig", "Build/Step/Run.zig"]


def test_find_glob_with_limit(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "find", "Build/*.zig", "--mode", "glob", "--limit", "2"], capsys)
    assert code == 0
    assert out.splitlines() == ["Build/Cache.zig", "Build/Cache/DepTokenizer.zig"]


def test_find_ignore_case(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "find", "allocator.zig", "--mode", "basename", "-i"], capsys)
    assert code == 0
    assert out.splitlines() == ["mem/Allocator.zig"]


def test_find_bad_regex(manifest_file: Path, capsys) -> None:
    code, _, err = run(["-m", str(manifest_file), "find", "(", "--mode", "regex"], capsys)
    assert code == 2
    assert "ERROR:" in err


def test_tree(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "tree", "os", "--no-lines"], capsys)
    assert code == 0
    assert out.splitlines() == ["os/", "└── linux/", "    └── x86_64.zig"]


def test_export_js_ignores_json_flag(manifest_file: Path, capsys) -> None:
    code, out, _ = run(["-m", str(manifest_file), "--json", "export", "--format", "js"], capsys)
    assert code == 0
    assert out.startswith('var files =[["std.zig",0]')


# -----------------------------------------------------------------------------
# INPUT AND CONFIGURATION HANDLING
# -----------------------------------------------------------------------------

def test_no_command_prints_help(capsys) -> None:
    code, _, err = run([], capsys)
    assert code == 2
    assert "usage:" in err


def test_missing_manifest(tmp_path: Path, capsys) -> None:
    code, _, err = run(["-m", str(tmp_path / "absent.js"), "stats"], capsys)
    assert code == 2
    assert "Manifest not found" in err


def test_no_manifest_configured(capsys) -> None:
    code, _, err = run(["stats"], capsys)
    assert code == 2
    assert "No manifest given" in err


def test_malformed_manifest(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.js"
    bad.write_text("var files = [[", encoding="utf-8")
    code, _, err = run(["-m", str(bad), "stats"], capsys)
    assert code == 2
    assert "bad.js" in err


def test_duplicate_policy(tmp_path: Path, capsys) -> None:
    dup = tmp_path / "dup.json"
    dup.write_text('[["a.zig", 1], ["a.zig", 4]]', encoding="utf-8")

    code, _, err = run(["-m", str(dup), "total"], capsys)
    assert code == 2
    assert "a.zig" in err

    code, out, _ = run(["-m", str(dup), "--on-duplicate", "last", "total"], capsys)
    assert code == 0
    assert out.strip() == "4"


def test_custom_delimiter(tmp_path: Path, capsys) -> None:
    manifest = tmp_path / "dotted.json"
    manifest.write_text('[["pkg.mod.a", 2], ["pkg.mod.b", 3]]', encoding="utf-8")
    code, out, _ = run(["-m", str(manifest), "--delimiter", ".", "total", "pkg.mod"], capsys)
    assert code == 0
    assert out.strip() == "5"


def test_dump_config_applies_overrides(capsys) -> None:
    code, out, _ = run(["--use-defaults", "--delimiter", "::", "--dump-config"], capsys)
    assert code == 0
    conf = json.loads(out)
    assert conf["delimiter"] == "::"
    assert conf["search_mode"] == "substring"


def test_save_config_is_reused(manifest_file: Path, isolated_data_dir: Path, capsys) -> None:
    code, _, _ = run(["-m", str(manifest_file), "--save-config", "total"], capsys)
    assert code == 0
    assert (isolated_data_dir / "config.json").exists()

    code, out, _ = run(["total", "mem"], capsys)
    assert code == 0
    assert out.strip() == "11"


def test_log_file_written(manifest_file: Path, tmp_path: Path, capsys) -> None:
    log_file = tmp_path / "cli.log"
    code, _, _ = run(["-m", str(manifest_file), "--log-file", str(log_file), "stats"], capsys)
    shutdown_logging()
    assert code == 0
    assert log_file.exists()
