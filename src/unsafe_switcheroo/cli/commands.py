"""
CLI Command Handlers Facade.

Re-exports handlers from `unsafe_switcheroo.cli.handlers` so the dispatcher
(and test patches) target a single module.
"""

from unsafe_switcheroo.cli.handlers.fix import _fix_single_file, _print_batch_summary, handle_fix
from unsafe_switcheroo.cli.handlers.preview import handle_preview
from unsafe_switcheroo.cli.handlers.scan import handle_scan

__all__ = [
  "_fix_single_file",
  "_print_batch_summary",
  "handle_fix",
  "handle_preview",
  "handle_scan",
]
