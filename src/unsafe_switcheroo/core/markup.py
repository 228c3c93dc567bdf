"""
Hover Markup.

Display collaborator for previews. Builds the same block layout as a keyword
hover: an optional path code block, the title as a `rust` code block, then the
body after a horizontal rule.
"""

from typing import Optional


def markup(docs: Optional[str], desc: str, mod_path: Optional[str] = None) -> str:
  """
  Renders a markdown hover block.

  Args:
      docs: Body shown below the rule; omitted when None.
      desc: Title, rendered as a `rust` code block.
      mod_path: Optional module path shown above the title.

  Returns:
      str: Markdown text.
  """
  buf = ""
  if mod_path:
    buf += f"```rust\n{mod_path}\n```\n\n"
  buf += f"```rust\n{desc}\n```"
  if docs is not None:
    buf += f"\n___\n\n{docs}"
  return buf


def plain(docs: Optional[str], desc: str, mod_path: Optional[str] = None) -> str:
  """Terminal-friendly variant of `markup` without markdown syntax."""
  parts = []
  if mod_path:
    parts.append(mod_path)
  parts.append(desc)
  parts.append("-" * len(desc))
  buf = "\n".join(parts)
  if docs is not None:
    buf += f"\n\n{docs}"
  return buf
