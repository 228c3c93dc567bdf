"""
Tests for the dry-run diff renderer.
"""

from unsafe_switcheroo.utils.text_diff import unified_diff


def test_unchanged_is_empty():
  assert unified_diff("fn a() {}\n", "fn a() {}\n") == ""


def test_headers_and_lines():
  diff = unified_diff("a\nb\n", "a\nc\n", path="src/lib.rs")
  lines = diff.splitlines()
  assert lines[0] == "--- a/src/lib.rs"
  assert lines[1] == "+++ b/src/lib.rs"
  assert "-b" in lines
  assert "+c" in lines


def test_missing_trailing_newline_is_terminated():
  diff = unified_diff("x", "y")
  assert diff.endswith("+y\n")
