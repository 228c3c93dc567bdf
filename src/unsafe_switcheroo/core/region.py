"""
Unsafe Region Discovery.

An `UnsafeRegion` is the boundary of one `unsafe { ... }` block together with
the layout facts the rest of the pipeline needs: its full text range, its
statement list, its indentation, and the statement of the outer block that
encloses it (the *anchor* used for sibling searches and for hoisting).
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from tree_sitter import Node

from unsafe_switcheroo.core.outcome import NotApplicable, Outcome, reject
from unsafe_switcheroo.enums import Rejection
from unsafe_switcheroo.syntax import kinds
from unsafe_switcheroo.syntax.tree import SyntaxTree, TextRange, same_node


@dataclass(frozen=True)
class UnsafeRegion:
  """
  Read-only view of an unsafe block.

  Attributes:
      tree: The syntax tree snapshot the region belongs to.
      node: The `unsafe_block` node.
      body: The block holding the region's statements.
      anchor: The outer-block statement enclosing the region, or None when the
          block sits in a position that cannot host sibling statements
          (e.g. a call argument).
      range: Full text range; covers the enclosing expression statement when
          that statement is only the block and its `;`.
      indent: Indentation of the line the region starts on.
  """

  tree: SyntaxTree
  node: Node
  body: Node
  anchor: Optional[Node]
  range: TextRange
  indent: str

  @classmethod
  def from_node(cls, tree: SyntaxTree, node: Node) -> Outcome["UnsafeRegion"]:
    """
    Resolves an `unsafe_block` node into a region.

    Args:
        tree: The owning syntax tree.
        node: The `unsafe_block` node.

    Returns:
        UnsafeRegion, or NotApplicable(REGION_NOT_BLOCK) when the node has no
        block body.
    """
    if node.type != kinds.UNSAFE_BLOCK:
      return reject(Rejection.REGION_NOT_BLOCK, node.type)

    body = next((c for c in node.named_children if c.type == kinds.BLOCK), None)
    if body is None:
      return reject(Rejection.REGION_NOT_BLOCK, tree.text(node))

    anchor = _resolve_anchor(node)
    text_range = tree.range(node)
    if anchor is not None and _wraps_only(tree, anchor, node):
      text_range = tree.range(anchor)

    return cls(
      tree=tree,
      node=node,
      body=body,
      anchor=anchor,
      range=text_range,
      indent=tree.indent_level(anchor if anchor is not None else node),
    )

  @property
  def statements(self) -> List[Node]:
    """Statements of the region body, comments excluded."""
    return self.tree.statements(self.body)

  @property
  def text(self) -> str:
    return self.tree.text(self.node)

  @property
  def is_statement(self) -> bool:
    """
    True if the region stands alone as a statement of the outer block.

    Only then may the whole region be collapsed into a replacement.
    """
    if self.anchor is None:
      return False
    return same_node(self.anchor, self.node) or _wraps_only(self.tree, self.anchor, self.node)


def _resolve_anchor(node: Node) -> Optional[Node]:
  parent = node.parent
  if parent is None:
    return None
  if parent.type == kinds.BLOCK:
    return node
  if parent.type in (kinds.EXPRESSION_STATEMENT, kinds.LET_DECLARATION):
    grand = parent.parent
    if grand is not None and grand.type == kinds.BLOCK:
      return parent
  return None


def _wraps_only(tree: SyntaxTree, statement: Node, node: Node) -> bool:
  if statement.type != kinds.EXPRESSION_STATEMENT:
    return False
  children = tree.named_children(statement)
  return len(children) == 1 and same_node(children[0], node)


def find_region(tree: SyntaxTree, offset: int) -> Optional[UnsafeRegion]:
  """
  Locates the unsafe region whose `unsafe` keyword touches the cursor.

  Args:
      tree: Parsed source.
      offset: Cursor byte offset.

  Returns:
      Optional[UnsafeRegion]: The region, or None when the cursor is not on
      the keyword of an unsafe block (e.g. an `unsafe fn` modifier).
  """
  token = tree.find_token_at_offset(offset, kinds.UNSAFE_KW)
  if token is None or token.parent is None:
    return None
  region = UnsafeRegion.from_node(tree, token.parent)
  if isinstance(region, NotApplicable):
    return None
  return region


def iter_regions(tree: SyntaxTree) -> Iterator[UnsafeRegion]:
  """
  Yields every unsafe region of the document in document order.

  Args:
      tree: Parsed source.

  Yields:
      UnsafeRegion: Resolved regions; unresolvable blocks are skipped.
  """
  for node in tree.descendants(tree.root):
    if node.type != kinds.UNSAFE_BLOCK:
      continue
    region = UnsafeRegion.from_node(tree, node)
    if not isinstance(region, NotApplicable):
      yield region


def region_on_line(tree: SyntaxTree, line: int) -> Optional[UnsafeRegion]:
  """
  First unsafe region whose `unsafe` keyword sits on a 1-based line.

  Args:
      tree: Parsed source.
      line: 1-based line number.

  Returns:
      Optional[UnsafeRegion]: The region, or None.
  """
  for region in iter_regions(tree):
    if region.node.start_point[0] == line - 1:
      return region
  return None
