"""
Main Entry Point for unsafe-switcheroo CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `unsafe_switcheroo.cli.commands`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from unsafe_switcheroo import __version__
from unsafe_switcheroo.cli import commands
from unsafe_switcheroo.config import parse_cli_key_values
from unsafe_switcheroo.utils.console import set_verbose


def _add_cursor_args(cmd: argparse.ArgumentParser, required: bool) -> None:
  group = cmd.add_mutually_exclusive_group(required=required)
  group.add_argument("--offset", type=int, default=None, help="Byte offset of the `unsafe` keyword")
  group.add_argument("--line", type=int, default=None, help="1-based line of the unsafe block")


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="unsafe-switcheroo: Convert unsafe Rust idioms to safe code")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Log why candidates were rejected")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="List unsafe idioms and proposed rewrites")
  cmd_scan.add_argument("path", type=Path, help="Input Rust file or directory")
  cmd_scan.add_argument("--json", action="store_true", help="Print findings as JSON")
  cmd_scan.add_argument("--explain", action="store_true", help="Include rejected candidates and their reasons")

  # --- Command: FIX ---
  cmd_fix = subparsers.add_parser("fix", help="Apply safe rewrites to a Rust file or directory")
  cmd_fix.add_argument("path", type=Path, help="Input Rust file or directory")
  _add_cursor_args(cmd_fix, required=False)
  cmd_fix.add_argument("--out", type=Path, default=None, help="Output destination (file or dir). Default: in place")
  cmd_fix.add_argument("--dry-run", action="store_true", help="Print a unified diff without writing")
  cmd_fix.add_argument(
    "--json-trace", type=Path, default=None, help="Dump full execution trace (events, edits) to a JSON file."
  )
  cmd_fix.add_argument(
    "--config",
    nargs="*",
    help="Settings in key=value format (e.g. zero_fill_value=0u8 validated_unwrap=?)",
  )

  # --- Command: PREVIEW ---
  cmd_prev = subparsers.add_parser("preview", help="Show the hover preview for one unsafe block")
  cmd_prev.add_argument("path", type=Path, help="Input Rust file")
  _add_cursor_args(cmd_prev, required=True)
  cmd_prev.add_argument("--plain", action="store_true", help="Plain text instead of markdown")

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  if args.command == "scan":
    return commands.handle_scan(args.path, json_mode=args.json, explain=args.explain)

  elif args.command == "fix":
    return commands.handle_fix(
      args.path,
      output_path=args.out,
      offset=args.offset,
      line=args.line,
      dry_run=args.dry_run,
      settings=parse_cli_key_values(args.config),
      json_trace_path=args.json_trace,
    )

  elif args.command == "preview":
    return commands.handle_preview(args.path, offset=args.offset, line=args.line, plain=args.plain)

  return 0


if __name__ == "__main__":
  raise SystemExit(main())
