from __future__ import annotations

"""
Unit tests for search predicate factories.
"""

import pytest

from pathmanifest.core.index import predicates
from pathmanifest.core.index.predicates import build_predicate

SEGMENTS = ("Build", "Step", "Run.zig")


def test_prefix():
    assert predicates.prefix("Build/St")(SEGMENTS)
    assert not predicates.prefix("Step")(SEGMENTS)


def test_substring():
    assert predicates.substring("Step/Run")(SEGMENTS)
    assert not predicates.substring("run")(SEGMENTS)
    assert predicates.substring("run", case_sensitive=False)(SEGMENTS)


def test_glob_crosses_delimiters():
    assert predicates.glob("Build/*.zig")(SEGMENTS)
    assert predicates.glob("*Run.zig")(SEGMENTS)
    assert not predicates.glob("*.js")(SEGMENTS)


def test_glob_case_insensitive():
    assert predicates.glob("build/*", case_sensitive=False)(SEGMENTS)


def test_regex_searches_joined_path():
    assert predicates.regex(r"Step/R\w+\.zig$")(SEGMENTS)
    assert not predicates.regex(r"^Step")(SEGMENTS)


def test_regex_invalid_pattern_is_value_error():
    with pytest.raises(ValueError):
        predicates.regex("(unclosed")


def test_basename():
    assert predicates.basename("Run.zig")(SEGMENTS)
    assert not predicates.basename("Step")(SEGMENTS)


def test_custom_delimiter_used_for_joining():
    assert predicates.prefix("Build::Step", delimiter="::")(SEGMENTS)


@pytest.mark.parametrize("mode, pattern", [
    ("substring", "Step"),
    ("prefix", "Build"),
    ("glob", "*.zig"),
    ("regex", "Run"),
    ("basename", "Run.zig"),
    ("GLOB", "*.zig"),
])
def test_build_predicate_dispatch(mode, pattern):
    assert build_predicate(mode, pattern)(SEGMENTS)


def test_build_predicate_unknown_mode():
    with pytest.raises(ValueError):
        build_predicate("fuzzy", "x")


def test_predicates_drive_index_search(nested_index):
    found = list(nested_index.search(build_predicate("glob", "Build/*/*.zig")))
    assert found == [("Build", "Cache", "DepTokenizer.zig"), ("Build", "Step", "Run.zig")]
