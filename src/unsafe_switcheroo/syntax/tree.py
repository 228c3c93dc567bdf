"""
Syntax Tree Collaborator.

Thin wrapper around a `tree-sitter` parse of Rust source. It provides the
navigation primitives the rewrite engine consumes:

- node kind queries and text rendering,
- parent / child / descendant / sibling navigation (comments skipped),
- token lookup at a cursor offset,
- text ranges and indentation measurement.

All offsets are UTF-8 byte offsets into the source, matching tree-sitter.
The wrapper is an immutable snapshot: nothing here mutates the tree or text.
"""

from typing import Iterator, List, Optional

import tree_sitter_rust as tsrust
from pydantic import BaseModel, ConfigDict, Field
from tree_sitter import Language, Node, Parser

from unsafe_switcheroo.syntax import kinds

RUST_LANGUAGE = Language(tsrust.language())


class TextRange(BaseModel):
  """
  Half-open `[start, end)` byte range.
  """

  model_config = ConfigDict(frozen=True)

  start: int = Field(..., ge=0, description="Inclusive start offset.")
  end: int = Field(..., ge=0, description="Exclusive end offset.")

  @classmethod
  def empty(cls, offset: int) -> "TextRange":
    """Zero-length range at `offset` (an insertion point)."""
    return cls(start=offset, end=offset)

  def __str__(self) -> str:
    return f"{self.start}..{self.end}"


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
  """
  Structural identity check for two nodes of the same tree.

  Args:
      a: First node.
      b: Second node.

  Returns:
      bool: True if both denote the same span and kind.
  """
  if a is None or b is None:
    return False
  return a.type == b.type and a.start_byte == b.start_byte and a.end_byte == b.end_byte


def is_comment(node: Node) -> bool:
  return node.type in kinds.COMMENT_KINDS


class SyntaxTree:
  """
  Parsed Rust source plus navigation helpers.
  """

  def __init__(self, code: str) -> None:
    """
    Parses the given source.

    tree-sitter is error tolerant: malformed input still yields a tree with
    `ERROR` nodes, reported through `has_errors`.

    Args:
        code: Rust source text.
    """
    self.code = code
    self.source = code.encode("utf-8")
    parser = Parser(RUST_LANGUAGE)
    self.tree = parser.parse(self.source)

  @classmethod
  def parse(cls, code: str) -> "SyntaxTree":
    return cls(code)

  @property
  def root(self) -> Node:
    return self.tree.root_node

  @property
  def has_errors(self) -> bool:
    """True if the parse recovered from at least one syntax error."""
    return self.root.has_error

  # --- Text ---

  def text(self, node: Node) -> str:
    """
    Renders the source text of a node.

    Args:
        node: Any node of this tree.

    Returns:
        str: The exact source slice covered by the node.
    """
    return self.source[node.start_byte : node.end_byte].decode("utf-8")

  def slice(self, text_range: TextRange) -> str:
    return self.source[text_range.start : text_range.end].decode("utf-8")

  @staticmethod
  def range(node: Node) -> TextRange:
    return TextRange(start=node.start_byte, end=node.end_byte)

  # --- Navigation ---

  @staticmethod
  def named_children(node: Node) -> List[Node]:
    """Named children of `node`, comments excluded."""
    return [child for child in node.named_children if not is_comment(child)]

  @staticmethod
  def has_child_kind(node: Node, kind: str) -> bool:
    return any(child.type == kind for child in node.children)

  @staticmethod
  def descendants(node: Node) -> Iterator[Node]:
    """
    Pre-order (document order) walk over `node` and its named descendants.

    Args:
        node: The subtree root. It is yielded first.

    Yields:
        Node: Named nodes in document order.
    """
    stack = [node]
    while stack:
      current = stack.pop()
      yield current
      stack.extend(reversed(current.named_children))

  @staticmethod
  def prev_siblings(node: Node) -> Iterator[Node]:
    """
    Preceding named siblings, nearest first, comments skipped.

    The scan ends at the first node of the parent: it never leaves the
    enclosing block.
    """
    current = node.prev_named_sibling
    while current is not None:
      if not is_comment(current):
        yield current
      current = current.prev_named_sibling

  @staticmethod
  def next_siblings(node: Node) -> Iterator[Node]:
    """Following named siblings, nearest first, comments skipped."""
    current = node.next_named_sibling
    while current is not None:
      if not is_comment(current):
        yield current
      current = current.next_named_sibling

  def statements(self, block: Node) -> List[Node]:
    """
    Statement list of a `block` node.

    Includes a trailing tail expression, excludes comments and loop labels.
    """
    return [child for child in self.named_children(block) if child.type != kinds.LABEL]

  # --- Cursor lookup ---

  def tokens_at_offset(self, offset: int) -> List[Node]:
    """
    Leaf tokens touching a cursor offset.

    A cursor touches the token on its right (starting at or spanning the
    offset) and the token on its left (ending at the offset).

    Args:
        offset: Byte offset of the cursor.

    Returns:
        List[Node]: Zero, one or two distinct leaves, right-hand one first.
    """
    found: List[Node] = []
    if offset < 0 or offset > len(self.source):
      return found

    positions = [offset]
    if offset > 0:
      positions.append(offset - 1)

    for at in positions:
      node = self.root.descendant_for_byte_range(at, at)
      if node is None or node.child_count > 0:
        continue
      if not (node.start_byte <= offset <= node.end_byte):
        continue
      if not any(same_node(node, seen) for seen in found):
        found.append(node)
    return found

  def find_token_at_offset(self, offset: int, kind: str) -> Optional[Node]:
    """
    Returns the token of a given kind touching the offset, if any.

    Args:
        offset: Cursor byte offset.
        kind: Token kind (e.g. `unsafe`).

    Returns:
        Optional[Node]: The token or None.
    """
    for token in self.tokens_at_offset(offset):
      if token.type == kind:
        return token
    return None

  # --- Layout ---

  def line_start(self, offset: int) -> int:
    """Offset of the first byte of the line containing `offset`."""
    return self.source.rfind(b"\n", 0, offset) + 1

  def indent_level(self, node: Node) -> str:
    """
    Measures the indentation of the line on which `node` starts.

    Args:
        node: Any node.

    Returns:
        str: The leading whitespace (spaces and tabs) of that line.
    """
    start = self.line_start(node.start_byte)
    end = start
    while end < len(self.source) and self.source[end : end + 1] in (b" ", b"\t"):
      end += 1
    return self.source[start:end].decode("utf-8")

  def next_line_start(self, offset: int, limit: int) -> Optional[int]:
    """
    Start of the line following the first newline at or after `offset`.

    Args:
        offset: Where to begin looking for a newline.
        limit: The newline must occur strictly before this offset.

    Returns:
        Optional[int]: Offset just past the newline, or None if there is no
        newline in `[offset, limit)`.
    """
    newline = self.source.find(b"\n", offset, limit)
    if newline < 0:
      return None
    return newline + 1
