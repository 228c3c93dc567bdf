"""
Scan Command Handler.

Runs the classification pipeline over Rust sources without modifying them and
reports each unsafe idiom with its proposed safe replacement (or, with
`--explain`, the reason no rewrite is offered).
"""

import json
from pathlib import Path
from typing import List

from rich.markup import escape
from rich.table import Table

from unsafe_switcheroo.config import RuntimeConfig
from unsafe_switcheroo.core.engine import Finding, RewriteEngine
from unsafe_switcheroo.utils.console import console, log_error, log_info, log_warning

from .sources import collect_sources


def handle_scan(path: Path, json_mode: bool = False, explain: bool = False) -> int:
  """
  Scans a file or directory for convertible unsafe idioms.

  Args:
      path: Input Rust file or directory.
      json_mode: If True, output JSON to stdout and suppress Rich logs.
      explain: If True, also list rejected candidates.

  Returns:
      int: Exit code (0 on success, 1 if the path is missing or a file could
      not be read).
  """
  if not path.exists():
    log_error(f"Path not found: {path}")
    return 1

  try:
    config = RuntimeConfig.load(search_path=path)
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  files = collect_sources(path, config.extensions)
  if not files:
    log_warning(f"No {', '.join(config.extensions)} files found in {path}")
    return 0

  if not json_mode:
    log_info(f"Scanning {len(files)} files...")

  engine = RewriteEngine(config=config)
  findings: List[Finding] = []
  failed = False
  for f in files:
    try:
      code = f.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
      log_error(f"Failed to read {f}: {e}")
      failed = True
      continue
    findings.extend(engine.inspect(code, path=str(f)))

  shown = findings if explain else [f for f in findings if f.proposed]

  if json_mode:
    print(json.dumps([f.model_dump(mode="json") for f in shown], indent=2))
    return 1 if failed else 0

  if shown:
    table = Table(title="Unsafe Idioms")
    table.add_column("Location", style="bold blue")
    table.add_column("Idiom", style="cyan")
    table.add_column("Trigger", style="bold magenta")
    table.add_column("Safe Rewrite" if not explain else "Safe Rewrite / Reason")

    for finding in shown:
      outcome = escape(finding.replacement or "") if finding.proposed else f"[dim]{escape(_reason(finding))}[/dim]"
      table.add_row(f"{finding.path}:{finding.line}", finding.idiom.value, escape(finding.trigger), outcome)

    console.print(table)

  proposed = sum(1 for f in findings if f.proposed)
  console.print(f"[bold]Scan Summary for {path.name}[/bold]")
  console.print(f"Idiom candidates:  {len(findings)}")
  console.print(f"Convertible:       [green]{proposed}[/green]")
  console.print(f"Not convertible:   [yellow]{len(findings) - proposed}[/yellow]")

  return 1 if failed else 0


def _reason(finding: Finding) -> str:
  if finding.detail:
    return f"{finding.status}: {finding.detail}"
  return finding.status
