"""
Edit Planner.

Turns a confirmed match plus its generated text into an `EditPlan`: the exact
ranges to delete, replace or insert.

Decision procedure:

1.  Resolve the *offending statement*: the direct statement of the region body
    that consumes the idiom's call (`expr;`, `let p = expr;`, `lhs = expr;`).
2.  **Single statement** (nothing else in the region, comments ignored): the
    whole region range is removed. Companion idioms rewrite their companion
    statement in place and delete the region; the others replace the region
    with the generated text directly.
3.  **Multiple statements**: only the offending statement is deleted.
    Companion idioms still rewrite their companion in place; the others insert
    the generated text on its own line immediately above the region, at the
    region's indentation. The insertion point is the start of the line after
    the region's previous sibling.

Any unresolvable precondition yields `NotApplicable`; no partial plan is ever
produced.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from tree_sitter import Node

from unsafe_switcheroo.core.assists import Assist, Assists, SourceChangeBuilder
from unsafe_switcheroo.core.classifier import IdiomMatch
from unsafe_switcheroo.core.outcome import NotApplicable, Outcome, reject
from unsafe_switcheroo.enums import AssistKind, Rejection, UnsafeIdiom
from unsafe_switcheroo.syntax import kinds
from unsafe_switcheroo.syntax.tree import TextRange, same_node

ASSIST_ID = "convert_unsafe_to_safe"
ASSIST_LABEL = "Convert Unsafe to Safe"


class EditShape(str, Enum):
  """How a plan reshapes the region."""

  COLLAPSE = "collapse"
  COLLAPSE_WITH_COMPANION = "collapse_with_companion"
  EXCISE_WITH_COMPANION = "excise_with_companion"
  EXCISE_AND_HOIST = "excise_and_hoist"


class EditPlan(BaseModel):
  """
  The concrete edit decided for one match.

  Attributes:
      idiom: The idiom being rewritten.
      shape: Which branch of the decision procedure applied.
      target: Range removed from the document (region or statement).
      replacement: Text replacing `target`; None means plain deletion.
      insert_at: Offset of a hoisted insertion, if any.
      insert_text: Hoisted text (indented, newline-terminated).
      companion: Range of a companion statement rewritten in place.
      companion_text: Replacement for `companion`.
  """

  model_config = ConfigDict(frozen=True)

  idiom: UnsafeIdiom
  shape: EditShape
  target: TextRange
  replacement: Optional[str] = None
  insert_at: Optional[int] = Field(None, ge=0)
  insert_text: Optional[str] = None
  companion: Optional[TextRange] = None
  companion_text: Optional[str] = None

  def apply_to(self, edit: SourceChangeBuilder) -> None:
    """
    Records the plan's operations on an edit builder.

    Args:
        edit: The builder handed out by `Assists.add`.
    """
    if self.companion is not None and self.companion_text is not None:
      edit.replace(self.companion, self.companion_text)
    if self.insert_at is not None and self.insert_text is not None:
      edit.insert(self.insert_at, self.insert_text)
    if self.replacement is None:
      edit.delete(self.target)
    else:
      edit.replace(self.target, self.replacement)


def offending_statement(match: IdiomMatch) -> Outcome[Node]:
  """
  Finds the region statement that consumes the idiom's call.

  Args:
      match: A confirmed match.

  Returns:
      Node: A direct statement of the region body, or NotApplicable when the
      call is nested deeper (e.g. inside a closure or an argument list).
  """
  tree = match.tree
  node = match.call
  if node is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  parent = node.parent
  if parent is not None and parent.type in kinds.OPERAND_KINDS:
    node, parent = parent, parent.parent
  if parent is not None and parent.type in (kinds.EXPRESSION_STATEMENT, kinds.LET_DECLARATION):
    node, parent = parent, parent.parent

  if not same_node(parent, match.region.body):
    return reject(Rejection.NOT_A_REGION_STATEMENT, tree.text(node))
  return node


def is_single_statement(match: IdiomMatch, statement: Node) -> bool:
  """True if `statement` is the only statement of the region, comments ignored."""
  statements = match.region.statements
  return len(statements) == 1 and same_node(statements[0], statement)


def hoist_offset(match: IdiomMatch) -> Outcome[int]:
  """
  Insertion point for text hoisted above the region.

  The start of the line following the end of the region's previous sibling.

  Returns:
      int: Byte offset, or NotApplicable when there is no previous sibling or
      no line break between it and the region.
  """
  region = match.region
  if region.anchor is None:
    return reject(Rejection.NO_ENCLOSING_STATEMENT, region.text)

  previous = region.anchor.prev_named_sibling
  if previous is None:
    return reject(Rejection.NO_ANCHOR, region.text)

  offset = region.tree.next_line_start(previous.end_byte, region.anchor.start_byte)
  if offset is None:
    return reject(Rejection.NO_LINE_BOUNDARY, region.text)
  return offset


def plan_edit(match: IdiomMatch, generated: str) -> Outcome[EditPlan]:
  """
  Decides the edit shape for a confirmed match.

  Args:
      match: The confirmed match.
      generated: Replacement statement text from the Code Generators.

  Returns:
      EditPlan, or NotApplicable if any structural precondition fails.
  """
  tree = match.tree
  region = match.region

  statement = offending_statement(match)
  if isinstance(statement, NotApplicable):
    return statement

  single = is_single_statement(match, statement)
  if single and not region.is_statement:
    return reject(Rejection.REGION_NOT_STATEMENT, region.text)

  if match.idiom.has_companion:
    companion = match.reservation
    if companion is None:
      return reject(Rejection.MISSING_RESERVATION, region.text)
    return EditPlan(
      idiom=match.idiom,
      shape=EditShape.COLLAPSE_WITH_COMPANION if single else EditShape.EXCISE_WITH_COMPANION,
      target=region.range if single else tree.range(statement),
      companion=tree.range(companion),
      companion_text=generated,
    )

  if single:
    return EditPlan(
      idiom=match.idiom,
      shape=EditShape.COLLAPSE,
      target=region.range,
      replacement=generated,
    )

  offset = hoist_offset(match)
  if isinstance(offset, NotApplicable):
    return offset
  return EditPlan(
    idiom=match.idiom,
    shape=EditShape.EXCISE_AND_HOIST,
    target=tree.range(statement),
    insert_at=offset,
    insert_text=f"{region.indent}{generated}\n",
  )


def register(assists: Assists, plan: EditPlan) -> Assist:
  """
  Registers exactly one edit action for a plan.

  Args:
      assists: The request's assist accumulator.
      plan: The plan to expose.

  Returns:
      Assist: The registered quick-fix.
  """
  return assists.add(
    ASSIST_ID,
    AssistKind.REFACTOR_REWRITE,
    ASSIST_LABEL,
    plan.target,
    plan.apply_to,
    idiom=plan.idiom,
  )
