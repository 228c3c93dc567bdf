from .fix import handle_fix, _fix_single_file, _print_batch_summary
from .preview import handle_preview
from .scan import handle_scan

__all__ = [
  "_fix_single_file",
  "_print_batch_summary",
  "handle_fix",
  "handle_preview",
  "handle_scan",
]
