"""
Orchestration Engine for Unsafe-to-Safe Rewrites.

This module provides the `RewriteEngine`, the entry point used by the CLI and
by library callers. Each request parses a fresh snapshot of the source and runs
every region through the pipeline:

1.  **Region Discovery**: the `unsafe` keyword under the cursor
    (`assists`, `hover`) or every unsafe block in the document (`run`,
    `inspect`).
2.  **Classification**: signature hits confirmed against the Pattern Catalog.
3.  **Extraction & Generation**: ingredients read from fixed argument
    positions, rendered into the safe replacement statement.
4.  **Planning**: the replacement becomes a `convert_unsafe_to_safe` assist.

Nothing is cached between requests. Each request gets its own `TraceLogger`.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field

from unsafe_switcheroo.config import RuntimeConfig
from unsafe_switcheroo.core.assists import Assist, Assists, OverlappingEditError, TextEdit
from unsafe_switcheroo.core.classifier import IdiomMatch, inspect_region
from unsafe_switcheroo.core.conversion_result import RewriteResult
from unsafe_switcheroo.core.extractors import extract
from unsafe_switcheroo.core.generators import generate
from unsafe_switcheroo.core.outcome import NotApplicable, Outcome
from unsafe_switcheroo.core.planner import EditPlan, plan_edit, register
from unsafe_switcheroo.core.preview import render_preview
from unsafe_switcheroo.core.region import UnsafeRegion, find_region, iter_regions, region_on_line
from unsafe_switcheroo.core.tracer import TraceLogger
from unsafe_switcheroo.enums import UnsafeIdiom
from unsafe_switcheroo.syntax.tree import SyntaxTree

logger = logging.getLogger(__name__)

PROPOSED = "proposed"


@dataclass(frozen=True)
class Proposal:
  """
  Pipeline outcome for one signature hit.

  Attributes:
      idiom: The catalog entry the trigger named.
      trigger: Rendered trigger text.
      region: The region the trigger sits in.
      outcome: The registered assist, or why the candidate was dropped.
      generated: Replacement text, once generation succeeded.
      plan: The edit plan, once planning succeeded.
      match: The confirmed match, once classification succeeded.
  """

  idiom: UnsafeIdiom
  trigger: str
  region: UnsafeRegion
  outcome: Outcome[Assist]
  generated: Optional[str] = None
  plan: Optional[EditPlan] = None
  match: Optional[IdiomMatch] = None

  @property
  def assist(self) -> Optional[Assist]:
    if isinstance(self.outcome, NotApplicable):
      return None
    return self.outcome


class Finding(BaseModel):
  """
  One row of a scan report.
  """

  path: str = Field(default="", description="File the region was found in.")
  line: int = Field(..., ge=1, description="1-based line of the `unsafe` keyword.")
  region: str = Field(..., description="Byte range of the region.")
  idiom: UnsafeIdiom
  trigger: str
  status: str = Field(..., description="'proposed' or the rejection reason.")
  detail: str = ""
  replacement: Optional[str] = None

  @property
  def proposed(self) -> bool:
    return self.status == PROPOSED


class HoverResult(BaseModel):
  """
  A hover preview plus the quick-fixes offered for the hovered region.
  """

  markup: str
  actions: List[Assist] = Field(default_factory=list)


class RewriteEngine:
  """
  Converts unsafe Rust idioms into checked equivalents.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None):
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): The runtime configuration object.
            Defaults to the built-in settings (no pyproject lookup).
    """
    self.config = config or RuntimeConfig()
    self.enabled = frozenset(self.config.enabled_idioms)
    self.options = self.config.generator_options

  def parse(self, code: str, tracer: Optional[TraceLogger] = None) -> SyntaxTree:
    """
    Parses Rust source into a syntax tree snapshot.

    Parsing never fails: syntax errors are recovered and reported as a
    trace warning.

    Args:
        code (str): Rust source code.
        tracer (TraceLogger, optional): Receives the syntax-error warning.

    Returns:
        SyntaxTree: The parsed snapshot.
    """
    tree = SyntaxTree.parse(code)
    if tree.has_errors:
      logger.debug("Source contains syntax errors; continuing with recovered tree")
      if tracer is not None:
        tracer.log_warning("Source contains syntax errors")
    return tree

  # --- Pipeline ---

  def _realize(self, match: IdiomMatch, assists: Assists, tracer: TraceLogger) -> Proposal:
    tree = match.tree
    trigger = tree.text(match.trigger)
    tracer.log_match(match.idiom.value, trigger, str(match.region.range))

    ingredients = extract(match)
    if isinstance(ingredients, NotApplicable):
      tracer.log_inspection(trigger, ingredients.reason.value, ingredients.detail)
      return Proposal(match.idiom, trigger, match.region, ingredients, match=match)

    generated = generate(match.idiom, ingredients, self.options)
    plan = plan_edit(match, generated)
    if isinstance(plan, NotApplicable):
      tracer.log_inspection(trigger, plan.reason.value, plan.detail)
      return Proposal(match.idiom, trigger, match.region, plan, generated=generated, match=match)

    assist = register(assists, plan)
    before = tree.slice(plan.companion if plan.companion is not None else plan.target)
    tracer.log_edit(plan.shape.value, before, generated)
    return Proposal(match.idiom, trigger, match.region, assist, generated=generated, plan=plan, match=match)

  def propose(
    self,
    tree: SyntaxTree,
    region: UnsafeRegion,
    tracer: Optional[TraceLogger] = None,
    assists: Optional[Assists] = None,
  ) -> List[Proposal]:
    """
    Runs one region through the whole pipeline.

    Args:
        tree (SyntaxTree): The snapshot the region belongs to.
        region (UnsafeRegion): The region to convert.
        tracer (TraceLogger, optional): Request trace.
        assists (Assists, optional): Accumulator the planned assists are
            registered on. A private one is used when omitted.

    Returns:
        List[Proposal]: One entry per signature hit, in document order.
    """
    tracer = tracer or TraceLogger()
    tracer.start_phase("Classification", f"Region {region.range}")
    assists = assists if assists is not None else Assists()
    proposals = []
    for inspection in inspect_region(region, self.enabled):
      if inspection.confirmed:
        proposals.append(self._realize(inspection.outcome, assists, tracer))
        continue
      trigger = tree.text(inspection.trigger)
      rejected = inspection.outcome
      tracer.log_inspection(trigger, rejected.reason.value, rejected.detail)
      proposals.append(Proposal(inspection.idiom, trigger, region, rejected))
    tracer.end_phase()
    return proposals

  def proposals_at(
    self,
    code: str,
    offset: int,
    tracer: Optional[TraceLogger] = None,
    assists: Optional[Assists] = None,
  ) -> List[Proposal]:
    """
    Pipeline results for the region whose `unsafe` keyword touches `offset`.

    Args:
        code (str): Rust source code.
        offset (int): Cursor byte offset.
        tracer (TraceLogger, optional): Request trace.
        assists (Assists, optional): Accumulator for the planned assists.

    Returns:
        List[Proposal]: Empty when the cursor is not on an unsafe block keyword.
    """
    tree = self.parse(code, tracer)
    region = find_region(tree, offset)
    if region is None:
      return []
    return self.propose(tree, region, tracer, assists)

  # --- Public entry points ---

  def offset_for_line(self, code: str, line: int) -> Optional[int]:
    """
    Cursor offset of the first unsafe block keyword on a 1-based line.

    Args:
        code (str): Rust source code.
        line (int): 1-based line number.

    Returns:
        Optional[int]: Byte offset, or None if no unsafe block starts there.
    """
    region = region_on_line(self.parse(code), line)
    return region.node.start_byte if region is not None else None

  def assists(self, code: str, offset: int) -> List[Assist]:
    """
    Quick-fixes for the unsafe block under the cursor.

    Args:
        code (str): Rust source code.
        offset (int): Cursor byte offset on the `unsafe` keyword.

    Returns:
        List[Assist]: One assist per confirmed and plannable match.
    """
    offered = Assists()
    self.proposals_at(code, offset, assists=offered)
    return offered.finish()

  def hover(self, code: str, offset: int, markdown: Optional[bool] = None) -> Optional[HoverResult]:
    """
    Preview of the first convertible idiom in the hovered region.

    Args:
        code (str): Rust source code.
        offset (int): Cursor byte offset on the `unsafe` keyword.
        markdown (bool, optional): Rendering mode; defaults to the config.

    Returns:
        Optional[HoverResult]: None when nothing can be previewed, so the
        caller can fall back to keyword documentation.
    """
    use_markdown = self.config.markdown if markdown is None else markdown
    proposals = self.proposals_at(code, offset)
    actions = [p.assist for p in proposals if p.assist is not None]
    for proposal in proposals:
      if proposal.plan is None or proposal.match is None or proposal.generated is None:
        continue
      block = render_preview(proposal.match, proposal.generated, use_markdown)
      if isinstance(block, NotApplicable):
        continue
      return HoverResult(markup=block, actions=actions)
    return None

  def inspect(self, code: str, path: str = "") -> List[Finding]:
    """
    Reports every signature hit of a document, proposed or rejected.

    Args:
        code (str): Rust source code.
        path (str): Label copied into each finding.

    Returns:
        List[Finding]: Findings in document order.
    """
    tracer = TraceLogger()
    tree = self.parse(code, tracer)
    findings = []
    for region in iter_regions(tree):
      line = region.node.start_point[0] + 1
      for proposal in self.propose(tree, region, tracer):
        outcome = proposal.outcome
        rejected = isinstance(outcome, NotApplicable)
        findings.append(
          Finding(
            path=path,
            line=line,
            region=str(region.range),
            idiom=proposal.idiom,
            trigger=proposal.trigger,
            status=outcome.reason.value if rejected else PROPOSED,
            detail=outcome.detail if rejected else "",
            replacement=proposal.generated,
          )
        )
    return findings

  def run(self, code: str, offset: Optional[int] = None) -> RewriteResult:
    """
    Applies the first proposal of each region.

    Proposals whose edits overlap an already accepted one are skipped and
    reported in `errors`.

    Args:
        code (str): Rust source code.
        offset (int, optional): Restrict the rewrite to the region at this
            cursor offset.

    Returns:
        RewriteResult: The rewritten code, applied assists, and trace.
    """
    tracer = TraceLogger()
    tracer.start_phase("Rewrite Pipeline", "unsafe -> safe")

    tree = self.parse(code, tracer)
    errors: List[str] = []
    if offset is None:
      regions = list(iter_regions(tree))
    else:
      region = find_region(tree, offset)
      regions = [region] if region is not None else []
      if region is None:
        errors.append(f"No unsafe block at offset {offset}")

    combined = TextEdit()
    applied: List[Assist] = []
    for region in regions:
      assist = next((p.assist for p in self.propose(tree, region, tracer) if p.assist is not None), None)
      if assist is None:
        continue
      try:
        combined = combined.union(assist.edit)
      except OverlappingEditError as e:
        message = f"Skipped {assist.idiom.value if assist.idiom else assist.id} at {assist.target}: {e}"
        tracer.log_warning(message)
        errors.append(message)
        continue
      applied.append(assist)

    new_code = combined.apply(code)
    tracer.end_phase()
    return RewriteResult(code=new_code, applied=applied, errors=errors, success=True, trace_events=tracer.export())
