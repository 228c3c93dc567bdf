"""
Fix Command Handler.

This module implements the logic for the `unsafe_switcheroo fix` command.
It orchestrates:
1. Configuration loading (pyproject table + `--config` overrides).
2. Cursor resolution (`--offset` / `--line`) for single-block fixes.
3. Rewriting via the Engine.
4. Output writing (or a unified diff for `--dry-run`) and trace logging.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from rich.markup import escape
from rich.table import Table

from unsafe_switcheroo.config import RuntimeConfig
from unsafe_switcheroo.core.conversion_result import RewriteResult
from unsafe_switcheroo.core.engine import RewriteEngine
from unsafe_switcheroo.utils.console import console, log_error, log_info, log_success, log_warning
from unsafe_switcheroo.utils.text_diff import unified_diff

from .sources import collect_sources, resolve_cursor


def handle_fix(
  input_path: Path,
  output_path: Optional[Path] = None,
  offset: Optional[int] = None,
  line: Optional[int] = None,
  dry_run: bool = False,
  settings: Optional[Dict[str, Any]] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'fix' command execution.

  Args:
      input_path: Rust file or directory to rewrite.
      output_path: Destination file or directory. Defaults to rewriting in place.
      offset: Only rewrite the block whose `unsafe` keyword touches this offset.
      line: Only rewrite the block starting on this 1-based line.
      dry_run: Print a unified diff instead of writing.
      settings: `key=value` overrides from `--config`.
      json_trace_path: Optional path to dump execution trace JSON (a
          directory when `input_path` is a directory).

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = RuntimeConfig.load(overrides=settings, search_path=input_path)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  engine = RewriteEngine(config=config)

  if input_path.is_file():
    result = _fix_single_file(engine, input_path, output_path or input_path, offset, line, dry_run, json_trace_path)
    return 0 if result.success and not result.has_errors else 1

  if offset is not None or line is not None:
    log_error("--offset and --line require a single input file.")
    return 1

  files = collect_sources(input_path, config.extensions)
  if not files:
    log_warning(f"No {', '.join(config.extensions)} files found in {input_path}")
    return 0

  log_info(f"Processing {len(files)} files from {input_path}...")

  batch_results: Dict[str, RewriteResult] = {}
  for src_file in files:
    rel_path = src_file.relative_to(input_path)
    dest_file = output_path / rel_path if output_path else src_file
    batch_trace = json_trace_path / rel_path.with_suffix(".trace.json") if json_trace_path else None
    batch_results[str(rel_path)] = _fix_single_file(engine, src_file, dest_file, None, None, dry_run, batch_trace)

  _print_batch_summary(batch_results)
  failed = any(not r.success or r.has_errors for r in batch_results.values())
  return 1 if failed else 0


def _fix_single_file(
  engine: RewriteEngine,
  input_path: Path,
  output_path: Path,
  offset: Optional[int],
  line: Optional[int],
  dry_run: bool,
  json_trace_path: Optional[Path] = None,
) -> RewriteResult:
  """
  Helper to execute the rewrite on a single file.

  Args:
      engine: Configured Rewrite Engine.
      input_path: Source file path.
      output_path: Destination file path.
      offset: Optional cursor offset.
      line: Optional 1-based line of the block.
      dry_run: Print a diff instead of writing.
      json_trace_path: Path to save trace event logs.

  Returns:
      RewriteResult: Result object containing status and code.
  """
  try:
    code = input_path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return RewriteResult(success=False, errors=[str(e)])

  cursor = resolve_cursor(engine, code, offset, line)
  if line is not None and cursor is None:
    message = f"No unsafe block on line {line} of {input_path}"
    log_error(message)
    return RewriteResult(code=code, success=False, errors=[message])

  result = engine.run(code, offset=cursor)

  if json_trace_path and result.trace_events:
    try:
      json_trace_path.parent.mkdir(parents=True, exist_ok=True)
      with open(json_trace_path, "wt", encoding="utf-8") as f:
        json.dump(result.trace_events, f, indent=2)
      log_info(f"Trace saved to [path]{json_trace_path}[/path]")
    except OSError as e:
      log_error(f"Failed to write trace: {e}")

  for error in result.errors:
    log_warning(escape(error))

  if dry_run:
    diff = unified_diff(code, result.code, str(input_path))
    if diff:
      print(diff, end="")
    else:
      log_info(f"No convertible unsafe idioms in [path]{input_path}[/path]")
    return result

  if not result.changed:
    log_info(f"No convertible unsafe idioms in [path]{input_path}[/path]")
    return result

  try:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wt", encoding="utf-8") as f:
      f.write(result.code)
  except OSError as e:
    log_error(f"Failed to write {output_path}: {e}")
    return RewriteResult(code=result.code, applied=result.applied, success=False, errors=[str(e)])

  log_success(f"Rewrote {len(result.applied)} unsafe block(s): [path]{input_path}[/path] -> [path]{output_path}[/path]")
  return result


def _print_batch_summary(results: Dict[str, RewriteResult]) -> None:
  """
  Renders a summary table of rewrite results to the console.

  Args:
      results: Dictionary mapping filenames to rewrite results.
  """
  total = len(results)
  rewritten = sum(len(r.applied) for r in results.values())
  failures = sum(1 for r in results.values() if not r.success or r.has_errors)

  if failures == 0:
    log_success(f"Batch Complete: {total} files processed, {rewritten} unsafe blocks rewritten.")
    return

  table = Table(title="Rewrite Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success and not res.has_errors:
      continue
    status = "❌ Failed" if not res.success else "⚠️ Warnings"
    issues = "; ".join(res.errors) if res.errors else "Unknown Error"
    table.add_row(filename, status, escape(issues))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {total - failures} Passed, {failures} with Issues.")
