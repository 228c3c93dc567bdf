"""
Source Text Diffs.

Renders before/after views of a document for `fix --dry-run`.
"""

import difflib


def unified_diff(before: str, after: str, path: str = "<stdin>") -> str:
  """
  Unified diff between two versions of a document.

  Args:
      before: Original text.
      after: Rewritten text.
      path: Label used in the `---` / `+++` header lines.

  Returns:
      str: The diff, or an empty string when nothing changed.
  """
  lines = difflib.unified_diff(
    before.splitlines(keepends=True),
    after.splitlines(keepends=True),
    fromfile=f"a/{path}",
    tofile=f"b/{path}",
  )
  out = []
  for line in lines:
    out.append(line if line.endswith("\n") else line + "\n")
  return "".join(out)
