"""
Entry point for module execution (``python -m unsafe_switcheroo``).

This module delegates execution to the CLI handler in ``unsafe_switcheroo.cli.__main__``.
"""

import sys

from unsafe_switcheroo.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
