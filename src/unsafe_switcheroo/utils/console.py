"""
Console and Logging.

Every message the tool prints goes through the standard `logging` module,
rendered by a `rich.logging.RichHandler`. Library modules only call
`logging.getLogger(__name__)`; rejected candidates are logged at DEBUG and
appear with `--verbose`.

The rich `Console` sits behind a proxy so tests can redirect all output
(tables, markdown previews, log records) into a buffer with `set_console`
without re-importing anything.

Attributes:
    console (_ConsoleProxy): The shared console every module prints through.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.theme import Theme

# Between INFO (20) and WARNING (30)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
    "idiom": "cyan",
    "removed": "red strike",
    "added": "green",
  }
)


def _attach_handler(target: Console, level: int) -> None:
  """
  Replaces any RichHandler on the root logger with one writing to `target`.

  Args:
      target: Console the records are rendered on.
      level: Root logger threshold.
  """
  root = logging.getLogger()
  for handler in [h for h in root.handlers if isinstance(h, RichHandler)]:
    root.removeHandler(handler)
  root.addHandler(
    RichHandler(
      console=target,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
  )
  root.setLevel(level)


class _ConsoleProxy:
  """
  Stable stand-in for the active `rich.console.Console`.

  Attribute access falls through to the backend, so `console.width` or
  `console.export_text()` behave as on a real Console.
  """

  def __init__(self) -> None:
    self._level = logging.INFO
    self._backend = Console(theme=_THEME)
    _attach_handler(self._backend, self._level)

  @property
  def backend(self) -> Console:
    return self._backend

  def set_backend(self, new_console: Console) -> None:
    """
    Routes printing and logging to `new_console`.

    Args:
        new_console: Any configured rich Console (e.g. one writing to StringIO).
    """
    self._backend = new_console
    _attach_handler(self._backend, self._level)

  def reset(self) -> None:
    """Back to a fresh stdout console at INFO level."""
    self._level = logging.INFO
    self.set_backend(Console(theme=_THEME))

  def set_level(self, level: int) -> None:
    self._level = level
    logging.getLogger().setLevel(level)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  console.set_backend(new_console)


def reset_console() -> None:
  console.reset()


def get_console() -> Console:
  """
  Returns:
      Console: The backend currently behind `console`.
  """
  return console.backend


def set_verbose(verbose: bool) -> None:
  """Shows DEBUG records (rejected candidates) when `verbose` is set."""
  console.set_level(logging.DEBUG if verbose else logging.INFO)


def print_markdown(text: str) -> None:
  """
  Renders a markdown block, such as a hover preview, on the active console.

  Args:
      text (str): Markdown source.
  """
  console.print(Markdown(text))


def log_info(msg: str) -> None:
  """
  Logs an informational line.

  Args:
      msg (str): Message text; rich markup such as `[path]..[/path]` is allowed.
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs a user-facing error. Callers decide the exit code.

  Args:
      msg (str): Message text.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
