"""
Idiom Classifier.

Walks every named descendant of an unsafe region in document order and tests
it against the Pattern Catalog. A node matches an idiom when its text equals
the idiom's canonical signature (path signatures also match when prefixed by
further path segments, e.g. `std::ptr::copy`). Equality on the callee node keeps
the catalog mutually exclusive: `ptr::copy` never claims a
`ptr::copy_nonoverlapping` call, nor `get_unchecked` a `get_unchecked_mut` one.

Most idioms are confirmed by the trigger alone. The reserved-then-uninitialised
buffer idiom spans several statements and needs two companions from the outer
block:

1.  **Reservation** (backward scan from the region's enclosing statement): a
    `let` binding the buffer with `Vec::with_capacity(..)`, or a
    `<buf>.reserve(..);` statement.
2.  **Read** (forward scan): a later statement that reads the buffer.

Both scans are bounded: they stop at the first hit, at a `let` that rebinds the
buffer name (shadowing ends the search, unsuccessfully), and at the enclosing
block boundary.

The classifier is a pure scan: it never mutates the tree and never raises for
malformed input.
"""

from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, Iterator, Optional, Tuple

from tree_sitter import Node

from unsafe_switcheroo.core.outcome import NotApplicable, Outcome, reject
from unsafe_switcheroo.core.region import UnsafeRegion
from unsafe_switcheroo.enums import (
  RESERVE_CAPACITY_SIGNATURE,
  RESERVE_METHOD_SIGNATURE,
  Rejection,
  UnsafeIdiom,
)
from unsafe_switcheroo.syntax import kinds
from unsafe_switcheroo.syntax.tree import SyntaxTree, same_node


@dataclass(frozen=True)
class IdiomMatch:
  """
  A confirmed idiom occurrence.

  Lives for one classification pass only.

  Attributes:
      idiom: The catalog entry.
      trigger: The signature node inside the region.
      region: The region being classified.
      companions: Statements outside the region that confirmed the match
          (reservation first, then read) for multi-statement idioms.
  """

  idiom: UnsafeIdiom
  trigger: Node
  region: UnsafeRegion
  companions: Tuple[Node, ...] = field(default_factory=tuple)

  @property
  def tree(self) -> SyntaxTree:
    return self.region.tree

  @property
  def reservation(self) -> Optional[Node]:
    """The capacity-reservation statement, if the idiom needs one."""
    return self.companions[0] if self.companions else None

  @property
  def read(self) -> Optional[Node]:
    return self.companions[1] if len(self.companions) > 1 else None

  @property
  def call(self) -> Optional[Node]:
    """The call expression the trigger names, or None for a stray name."""
    return call_of_trigger(self.trigger)


@dataclass(frozen=True)
class Inspection:
  """
  Diagnostic record for one signature hit: the confirmed match or the reason
  it was discarded.
  """

  trigger: Node
  idiom: UnsafeIdiom
  outcome: Outcome[IdiomMatch]

  @property
  def confirmed(self) -> bool:
    return not isinstance(self.outcome, NotApplicable)


# --- Signature matching ---

# Method signatures name a `field_identifier`, path signatures a `scoped_identifier`.
_METHOD_TRIGGER_KINDS = frozenset({kinds.FIELD_IDENTIFIER})
_PATH_TRIGGER_KINDS = frozenset({kinds.SCOPED_IDENTIFIER})


def path_matches(text: str, signature: str) -> bool:
  """
  True if a callee path spells `signature`, optionally further qualified.

  Args:
      text: Rendered callee path (e.g. `std::ptr::copy`).
      signature: Canonical signature (e.g. `ptr::copy`).
  """
  return text == signature or text.endswith(f"::{signature}")


def signature_of(tree: SyntaxTree, node: Node) -> Optional[UnsafeIdiom]:
  """
  Attributes at most one catalog entry to a node.

  Args:
      tree: The owning tree.
      node: Candidate node.

  Returns:
      Optional[UnsafeIdiom]: The matching idiom, or None.
  """
  if node.type in _METHOD_TRIGGER_KINDS:
    text = tree.text(node)
    for idiom in UnsafeIdiom:
      if not idiom.is_path_signature and text == idiom.signature:
        return idiom
  elif node.type in _PATH_TRIGGER_KINDS:
    text = tree.text(node)
    for idiom in UnsafeIdiom:
      if idiom.is_path_signature and path_matches(text, idiom.signature):
        return idiom
  return None


def call_of_trigger(trigger: Node) -> Optional[Node]:
  """
  Resolves the call expression a trigger node names.

  `buf.set_len(n)`: the trigger is the method name; its parent is the field
  expression, whose parent must be the call with that field as callee.
  `ptr::copy(..)`: the trigger is the callee path itself.

  Args:
      trigger: A node accepted by `signature_of`.

  Returns:
      Optional[Node]: The `call_expression`, or None for any other shape.
  """
  callee = trigger
  if trigger.type == kinds.FIELD_IDENTIFIER:
    callee = trigger.parent
    if callee is None or callee.type != kinds.FIELD_EXPRESSION:
      return None
    if not same_node(callee.child_by_field_name("field"), trigger):
      return None

  call = callee.parent
  if call is None or call.type != kinds.CALL_EXPRESSION:
    return None
  if not same_node(call.child_by_field_name("function"), callee):
    return None
  return call


def method_receiver(call: Node) -> Optional[Node]:
  """Receiver expression of a method call (`buf` in `buf.set_len(n)`)."""
  callee = call.child_by_field_name("function")
  if callee is None or callee.type != kinds.FIELD_EXPRESSION:
    return None
  return callee.child_by_field_name("value")


# --- Companion search ---


def _binds_name(tree: SyntaxTree, statement: Node, name: str) -> bool:
  if statement.type != kinds.LET_DECLARATION:
    return False
  pattern = statement.child_by_field_name("pattern")
  return pattern is not None and tree.text(pattern) == name


def _is_reservation(tree: SyntaxTree, statement: Node, buffer: str) -> Optional[bool]:
  """
  Tri-state check used by the backward scan.

  Returns:
      True if the statement reserves capacity for `buffer`, False if it
      rebinds `buffer` without reserving (the scan must stop), None otherwise.
  """
  if _binds_name(tree, statement, buffer):
    value = statement.child_by_field_name("value")
    if value is None or value.type != kinds.CALL_EXPRESSION:
      return False
    callee = value.child_by_field_name("function")
    return callee is not None and path_matches(tree.text(callee), RESERVE_CAPACITY_SIGNATURE)

  if statement.type == kinds.EXPRESSION_STATEMENT:
    children = tree.named_children(statement)
    call = children[0] if children else None
    if call is None or call.type != kinds.CALL_EXPRESSION:
      return None
    callee = call.child_by_field_name("function")
    if callee is None or callee.type != kinds.FIELD_EXPRESSION:
      return None
    method = callee.child_by_field_name("field")
    receiver = callee.child_by_field_name("value")
    if method is None or receiver is None:
      return None
    if tree.text(method) == RESERVE_METHOD_SIGNATURE and tree.text(receiver) == buffer:
      return True
  return None


def find_reservation(tree: SyntaxTree, anchor: Node, buffer: str) -> Optional[Node]:
  """
  Backward scan for the statement that reserved `buffer`.

  Args:
      tree: The owning tree.
      anchor: The region's enclosing statement.
      buffer: Rendered receiver of the `set_len` call.

  Returns:
      Optional[Node]: The companion statement, or None if the scan hit a
      rebinding or the block boundary first.
  """
  for statement in tree.prev_siblings(anchor):
    verdict = _is_reservation(tree, statement, buffer)
    if verdict is True:
      return statement
    if verdict is False:
      return None
  return None


def reads_buffer(tree: SyntaxTree, statement: Node, buffer: str) -> bool:
  """
  True if `statement` mentions `buffer` other than as a binding pattern.

  Simple names are matched token-wise; compound receivers (`self.buf`) fall
  back to a text search.
  """
  if not buffer.isidentifier():
    return buffer in tree.text(statement)

  for node in tree.descendants(statement):
    if node.type != kinds.IDENTIFIER or tree.text(node) != buffer:
      continue
    parent = node.parent
    if parent is not None and parent.type == kinds.LET_DECLARATION:
      if same_node(parent.child_by_field_name("pattern"), node):
        continue
    return True
  return False


def find_read(tree: SyntaxTree, anchor: Node, buffer: str) -> Optional[Node]:
  """
  Forward scan for the first statement reading `buffer`.

  Args:
      tree: The owning tree.
      anchor: The region's enclosing statement.
      buffer: Rendered receiver of the `set_len` call.

  Returns:
      Optional[Node]: The reading statement, or None if the scan hit a
      rebinding or the block boundary first.
  """
  for statement in tree.next_siblings(anchor):
    if reads_buffer(tree, statement, buffer):
      return statement
    if _binds_name(tree, statement, buffer):
      return None
  return None


# --- Per-idiom confirmation ---

Confirmer = Callable[[Node, UnsafeIdiom, UnsafeRegion], Outcome[IdiomMatch]]


def _confirm_local(trigger: Node, idiom: UnsafeIdiom, region: UnsafeRegion) -> Outcome[IdiomMatch]:
  return IdiomMatch(idiom=idiom, trigger=trigger, region=region)


def _confirm_reserved_buffer(trigger: Node, idiom: UnsafeIdiom, region: UnsafeRegion) -> Outcome[IdiomMatch]:
  tree = region.tree
  call = call_of_trigger(trigger)
  receiver = method_receiver(call) if call is not None else None
  if receiver is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(trigger))

  if region.anchor is None:
    return reject(Rejection.NO_ENCLOSING_STATEMENT, region.text)

  buffer = tree.text(receiver)
  reservation = find_reservation(tree, region.anchor, buffer)
  if reservation is None:
    return reject(Rejection.MISSING_RESERVATION, buffer)

  read = find_read(tree, region.anchor, buffer)
  if read is None:
    return reject(Rejection.MISSING_READ, buffer)

  return IdiomMatch(idiom=idiom, trigger=trigger, region=region, companions=(reservation, read))


CONFIRMERS: Dict[UnsafeIdiom, Confirmer] = {
  UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER: _confirm_reserved_buffer,
  UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER: _confirm_local,
  UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS: _confirm_local,
  UnsafeIdiom.UNCHECKED_INDEX_READ: _confirm_local,
  UnsafeIdiom.UNCHECKED_INDEX_WRITE: _confirm_local,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION: _confirm_local,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK: _confirm_local,
}


# --- Public scan API ---


def inspect_region(
  region: UnsafeRegion,
  enabled: Optional[Collection[UnsafeIdiom]] = None,
) -> Iterator[Inspection]:
  """
  Yields every signature hit of a region with its classification outcome.

  Args:
      region: The unsafe region to scan.
      enabled: Idioms to consider; None enables the whole catalog.

  Yields:
      Inspection: One record per trigger node, in document order.
  """
  tree = region.tree
  for node in tree.descendants(region.body):
    idiom = signature_of(tree, node)
    if idiom is None:
      continue
    if enabled is not None and idiom not in enabled:
      outcome: Outcome[IdiomMatch] = reject(Rejection.IDIOM_DISABLED, idiom.value)
    else:
      outcome = CONFIRMERS[idiom](node, idiom, region)
    yield Inspection(trigger=node, idiom=idiom, outcome=outcome)


def classify(
  region: UnsafeRegion,
  enabled: Optional[Collection[UnsafeIdiom]] = None,
) -> Iterator[IdiomMatch]:
  """
  Lazily yields the confirmed matches of a region, in document order.

  Unconfirmed candidates are skipped and scanning continues.

  Args:
      region: The unsafe region to scan.
      enabled: Idioms to consider; None enables the whole catalog.

  Yields:
      IdiomMatch: Confirmed matches.
  """
  for inspection in inspect_region(region, enabled):
    if inspection.confirmed:
      yield inspection.outcome


def classify_node(
  tree: SyntaxTree,
  node: Node,
  enabled: Optional[Collection[UnsafeIdiom]] = None,
) -> Iterator[IdiomMatch]:
  """
  Classifies from a raw region root node.

  Args:
      tree: The owning tree.
      node: Expected to be an `unsafe_block`.
      enabled: Idioms to consider.

  Yields:
      IdiomMatch: Confirmed matches; nothing if `node` is not block-shaped.
  """
  region = UnsafeRegion.from_node(tree, node)
  if isinstance(region, NotApplicable):
    return
  yield from classify(region, enabled)
