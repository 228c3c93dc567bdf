"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Rust parsing helpers (`rust`, `region_of`).
- Console capture so CLI output can be asserted on.
"""

import io
import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

# Add src to path so we can import 'unsafe_switcheroo' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rich.console import Console  # noqa: E402

from unsafe_switcheroo.core.region import UnsafeRegion, find_region  # noqa: E402
from unsafe_switcheroo.syntax.tree import SyntaxTree  # noqa: E402
from unsafe_switcheroo.utils.console import reset_console, set_console  # noqa: E402


def dedent(code: str) -> str:
  """Strips the common indentation of a triple-quoted Rust snippet."""
  return textwrap.dedent(code).lstrip("\n")


@pytest.fixture
def rust() -> Callable[[str], SyntaxTree]:
  """Parses a (dedented) Rust snippet."""

  def _parse(code: str) -> SyntaxTree:
    return SyntaxTree.parse(dedent(code))

  return _parse


@pytest.fixture
def region_of() -> Callable[..., UnsafeRegion]:
  """
  Returns the n-th unsafe region (by `unsafe` keyword occurrence) of a snippet.
  """

  def _region(code: str, nth: int = 0) -> UnsafeRegion:
    tree = SyntaxTree.parse(dedent(code))
    offset = -1
    for _ in range(nth + 1):
      offset = tree.code.index("unsafe {", offset + 1)
    region = find_region(tree, offset)
    assert region is not None, f"no unsafe block at {offset}"
    return region

  return _region


@pytest.fixture
def captured_console():
  """
  Routes console and logging output into a buffer for the duration of a test.

  Yields:
      io.StringIO: The capture buffer.
  """
  buf = io.StringIO()
  set_console(Console(file=buf, force_terminal=False, width=200))
  yield buf
  reset_console()
