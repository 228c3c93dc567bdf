"""
Input helpers shared by the command handlers.
"""

from pathlib import Path
from typing import List, Optional

from unsafe_switcheroo.core.engine import RewriteEngine


def collect_sources(path: Path, extensions: List[str]) -> List[Path]:
  """
  Files to process for a CLI path argument.

  Args:
      path: A file (always returned) or a directory (searched recursively).
      extensions: Accepted suffixes for directory entries, e.g. ['.rs'].

  Returns:
      List[Path]: Sorted file paths.
  """
  if path.is_file():
    return [path]
  suffixes = {ext.lower() for ext in extensions}
  return sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in suffixes)


def resolve_cursor(engine: RewriteEngine, code: str, offset: Optional[int], line: Optional[int]) -> Optional[int]:
  """
  Turns `--offset` / `--line` into a byte offset.

  Returns:
      Optional[int]: The offset, or None if `--line` names no unsafe block
      (or neither option was given).
  """
  if line is not None:
    return engine.offset_for_line(code, line)
  return offset
