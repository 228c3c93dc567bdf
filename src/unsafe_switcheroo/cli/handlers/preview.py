"""
Preview Command Handler.

Prints the hover preview (Original Code / Modified Code) for one unsafe block.
"""

from pathlib import Path
from typing import Optional

from unsafe_switcheroo.config import RuntimeConfig
from unsafe_switcheroo.core.engine import RewriteEngine
from unsafe_switcheroo.utils.console import log_error, log_warning, print_markdown

from .sources import resolve_cursor


def handle_preview(path: Path, offset: Optional[int] = None, line: Optional[int] = None, plain: bool = False) -> int:
  """
  Renders the preview of the first convertible idiom in a block.

  Args:
      path: Rust source file.
      offset: Byte offset of the `unsafe` keyword.
      line: 1-based line of the unsafe block (alternative to `offset`).
      plain: Plain text output instead of markdown.

  Returns:
      int: 0 if a preview was shown, 1 otherwise.
  """
  if not path.is_file():
    log_error(f"File not found: {path}")
    return 1

  try:
    code = path.read_text(encoding="utf-8")
    config = RuntimeConfig.load(markdown=False if plain else None, search_path=path)
  except (OSError, UnicodeDecodeError, ValueError) as e:
    log_error(f"Failed to prepare preview for {path}: {e}")
    return 1

  engine = RewriteEngine(config=config)
  cursor = resolve_cursor(engine, code, offset, line)
  if cursor is None:
    log_error("No unsafe block at the given position.")
    return 1

  hover = engine.hover(code, cursor)
  if hover is None:
    log_warning("No safe rewrite available for this unsafe block.")
    return 1

  if config.markdown:
    print_markdown(hover.markup)
  else:
    print(hover.markup)
  return 0
