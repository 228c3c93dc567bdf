"""
Ingredient Extractors.

One extractor per catalog entry. Each reads the fixed argument positions of the
idiom's call (no type information) and returns a plain, immutable Ingredients
model holding rendered sub-expression text, or a `NotApplicable` outcome when
the expected structure is absent.

Shapes handled:

- `buf.set_len(count)` plus the companion `let` / `reserve` statement.
- `ptr::copy(src, dst, count)`: `src` and `dst` must peel down to index
  expressions over one base. Peeling strips `&`, `&mut`, `as` casts,
  parentheses and `.as_ptr()` / `.as_mut_ptr()`.
- `ptr::copy_nonoverlapping(src, dst[, count])`: same peeling, bases may differ.
- `let p = recv.get_unchecked[_mut](index);`
- `CString::from_vec_unchecked(bytes)` / `CStr::from_bytes_with_nul_unchecked(bytes)`
  either as a `let` initializer or as the right operand of an assignment or
  binary expression statement.
"""

from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from tree_sitter import Node

from unsafe_switcheroo.core.classifier import IdiomMatch, method_receiver
from unsafe_switcheroo.core.outcome import Outcome, reject
from unsafe_switcheroo.enums import Rejection, UnsafeIdiom
from unsafe_switcheroo.syntax import kinds
from unsafe_switcheroo.syntax.tree import SyntaxTree, same_node


class _Ingredients(BaseModel):
  model_config = ConfigDict(frozen=True)


class BufferIngredients(_Ingredients):
  """Inputs for the zero-filled buffer rewrite."""

  buffer: str = Field(..., description="Receiver of the `set_len` call.")
  count: str = Field(..., description="The new logical length.")
  pattern: str = Field(..., description="Binding pattern of the reservation `let`.")
  type_annotation: Optional[str] = Field(None, description="Declared type of the binding, if any.")
  reserved_by_method: bool = Field(False, description="True if the companion is `buf.reserve(n);`.")


class CopyWithinIngredients(_Ingredients):
  """Inputs for `copy_within`; `count` is echoed from the third argument."""

  base: str
  start: str
  end: str
  count: str


class CopyFromSliceIngredients(_Ingredients):
  """Inputs for `copy_from_slice`; `count` is echoed when present."""

  src: str
  dst: str
  count: Optional[str] = None


class CheckedIndexIngredients(_Ingredients):
  """Inputs for the `get` / `get_mut` rewrite."""

  pattern: str
  receiver: str
  index: str
  mutable: bool = False


class ValidatedStringIngredients(_Ingredients):
  """
  Inputs for the validated constructor rewrite.

  Exactly one of `pattern` (binding shape) or `lhs` (operand shape) is set.
  """

  argument: str
  path_prefix: str = Field("", description="Qualifying path before the type (e.g. `std::ffi::`).")
  pattern: Optional[str] = None
  type_annotation: Optional[str] = None
  lhs: Optional[str] = None
  operator: str = "="

  @property
  def is_binding(self) -> bool:
    return self.pattern is not None


Ingredients = Union[
  BufferIngredients,
  CopyWithinIngredients,
  CopyFromSliceIngredients,
  CheckedIndexIngredients,
  ValidatedStringIngredients,
]


# --- Structural helpers ---


def call_arguments(tree: SyntaxTree, call: Node) -> List[Node]:
  """
  Positional arguments of a call, comments and attributes excluded.

  Args:
      tree: The owning tree.
      call: A `call_expression`.

  Returns:
      List[Node]: Argument expressions in order (empty if none).
  """
  arguments = call.child_by_field_name("arguments")
  if arguments is None:
    return []
  return [arg for arg in tree.named_children(arguments) if arg.type != "attribute_item"]


def peel_to_index(tree: SyntaxTree, node: Optional[Node]) -> Optional[Node]:
  """
  Strips pointer-making wrappers until an index expression is reached.

  Args:
      tree: The owning tree.
      node: An argument expression such as `&mut v[3] as *mut i32`.

  Returns:
      Optional[Node]: The `index_expression`, or None if another shape is hit.
  """
  current = node
  while current is not None:
    if current.type == kinds.INDEX_EXPRESSION:
      return current
    if current.type in kinds.POINTER_WRAPPER_KINDS:
      inner = current.child_by_field_name("value")
      if inner is None:
        children = tree.named_children(current)
        inner = children[0] if children else None
      current = inner
      continue
    if current.type == kinds.CALL_EXPRESSION:
      callee = current.child_by_field_name("function")
      if callee is None or callee.type != kinds.FIELD_EXPRESSION or call_arguments(tree, current):
        return None
      method = callee.child_by_field_name("field")
      if method is None or tree.text(method) not in kinds.POINTER_METHODS:
        return None
      current = callee.child_by_field_name("value")
      continue
    return None
  return None


def index_parts(tree: SyntaxTree, index_expr: Node) -> Optional[tuple]:
  """Splits `base[index]` into its `(base, index)` nodes."""
  children = tree.named_children(index_expr)
  if len(children) != 2:
    return None
  return children[0], children[1]


def binding_pattern(tree: SyntaxTree, let_stmt: Node) -> Optional[str]:
  """
  Renders the pattern of a `let`, keeping a leading `mut`.

  Args:
      tree: The owning tree.
      let_stmt: A `let_declaration`.

  Returns:
      Optional[str]: e.g. `mut buf`, or None if the binding has no pattern.
  """
  pattern = let_stmt.child_by_field_name("pattern")
  if pattern is None:
    return None
  text = tree.text(pattern)
  if tree.has_child_kind(let_stmt, kinds.MUTABLE_SPECIFIER):
    return f"mut {text}"
  return text


def _annotation(tree: SyntaxTree, let_stmt: Node) -> Optional[str]:
  declared = let_stmt.child_by_field_name("type")
  return tree.text(declared) if declared is not None else None


def _initializer_of(call: Node) -> Optional[Node]:
  """The `let` whose initializer is exactly `call`."""
  parent = call.parent
  if parent is None or parent.type != kinds.LET_DECLARATION:
    return None
  if not same_node(parent.child_by_field_name("value"), call):
    return None
  return parent


# --- Extractors ---

Extractor = Callable[[IdiomMatch], Outcome[Ingredients]]


def extract_buffer(match: IdiomMatch) -> Outcome[BufferIngredients]:
  """
  Receiver and single count argument of `set_len`, plus the companion binding.
  """
  tree = match.tree
  call = match.call
  receiver = method_receiver(call) if call is not None else None
  if receiver is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  args = call_arguments(tree, call)
  if len(args) != 1:
    return reject(Rejection.WRONG_ARITY, tree.text(call))

  companion = match.reservation
  if companion is None:
    return reject(Rejection.MISSING_RESERVATION, tree.text(receiver))

  buffer = tree.text(receiver)
  if companion.type == kinds.LET_DECLARATION:
    pattern = companion.child_by_field_name("pattern")
    return BufferIngredients(
      buffer=buffer,
      count=tree.text(args[0]),
      pattern=tree.text(pattern) if pattern is not None else buffer,
      type_annotation=_annotation(tree, companion),
    )

  return BufferIngredients(buffer=buffer, count=tree.text(args[0]), pattern=buffer, reserved_by_method=True)


def extract_copy_within(match: IdiomMatch) -> Outcome[CopyWithinIngredients]:
  """
  Three positional arguments; the first two index one shared base.
  """
  tree = match.tree
  call = match.call
  if call is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  args = call_arguments(tree, call)
  if len(args) != 3:
    return reject(Rejection.WRONG_ARITY, tree.text(call))

  src = peel_to_index(tree, args[0])
  dst = peel_to_index(tree, args[1])
  src_parts = index_parts(tree, src) if src is not None else None
  dst_parts = index_parts(tree, dst) if dst is not None else None
  if src_parts is None or dst_parts is None:
    return reject(Rejection.NOT_AN_INDEX_EXPRESSION, tree.text(call))

  base = tree.text(src_parts[0])
  if tree.text(dst_parts[0]) != base:
    return reject(Rejection.MISMATCHED_BASES, tree.text(call))

  return CopyWithinIngredients(
    base=base,
    start=tree.text(src_parts[1]),
    end=tree.text(dst_parts[1]),
    count=tree.text(args[2]),
  )


def extract_copy_from_slice(match: IdiomMatch) -> Outcome[CopyFromSliceIngredients]:
  """
  Two indexed buffers (source first); an optional third count argument.
  """
  tree = match.tree
  call = match.call
  if call is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  args = call_arguments(tree, call)
  if len(args) not in (2, 3):
    return reject(Rejection.WRONG_ARITY, tree.text(call))

  src = peel_to_index(tree, args[0])
  dst = peel_to_index(tree, args[1])
  if src is None or dst is None:
    return reject(Rejection.NOT_AN_INDEX_EXPRESSION, tree.text(call))

  return CopyFromSliceIngredients(
    src=tree.text(src),
    dst=tree.text(dst),
    count=tree.text(args[2]) if len(args) == 3 else None,
  )


def extract_checked_index(match: IdiomMatch) -> Outcome[CheckedIndexIngredients]:
  """
  Receiver and single index of an unchecked accessor consumed by a `let`.

  Mutability comes from the initializer: the `_mut` accessor, or an explicit
  `mut` marker inside it.
  """
  tree = match.tree
  call = match.call
  receiver = method_receiver(call) if call is not None else None
  if receiver is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  args = call_arguments(tree, call)
  if len(args) != 1:
    return reject(Rejection.WRONG_ARITY, tree.text(call))

  let_stmt = _initializer_of(call)
  pattern = binding_pattern(tree, let_stmt) if let_stmt is not None else None
  if pattern is None:
    return reject(Rejection.UNSUPPORTED_POSITION, tree.text(call))

  mutable = tree.text(match.trigger).endswith("_mut") or any(
    node.type == kinds.MUTABLE_SPECIFIER for node in tree.descendants(call)
  )
  return CheckedIndexIngredients(
    pattern=pattern,
    receiver=tree.text(receiver),
    index=tree.text(args[0]),
    mutable=mutable,
  )


def extract_validated_string(match: IdiomMatch) -> Outcome[ValidatedStringIngredients]:
  """
  Single raw-bytes argument, plus the subject of the surrounding shape.

  Branches on the call's syntactic position:
  - right operand of an assignment / binary expression statement: the left
    operand is the subject;
  - `let` initializer: the binding pattern is the subject.
  """
  tree = match.tree
  call = match.call
  if call is None:
    return reject(Rejection.UNEXPECTED_CALL_SHAPE, tree.text(match.trigger))

  args = call_arguments(tree, call)
  if len(args) != 1:
    return reject(Rejection.WRONG_ARITY, tree.text(call))

  callee_text = tree.text(match.trigger)
  prefix = callee_text[: len(callee_text) - len(match.idiom.signature)]
  argument = tree.text(args[0])

  parent = call.parent
  if parent is not None and parent.type in kinds.OPERAND_KINDS:
    left = parent.child_by_field_name("left")
    holder = parent.parent
    if (
      left is None
      or not same_node(parent.child_by_field_name("right"), call)
      or holder is None
      or holder.type != kinds.EXPRESSION_STATEMENT
    ):
      return reject(Rejection.UNSUPPORTED_POSITION, tree.text(parent))
    operator = parent.child_by_field_name("operator")
    return ValidatedStringIngredients(
      argument=argument,
      path_prefix=prefix,
      lhs=tree.text(left),
      operator=tree.text(operator) if operator is not None else "=",
    )

  let_stmt = _initializer_of(call)
  pattern = binding_pattern(tree, let_stmt) if let_stmt is not None else None
  if pattern is None:
    return reject(Rejection.UNSUPPORTED_POSITION, tree.text(call))

  return ValidatedStringIngredients(
    argument=argument,
    path_prefix=prefix,
    pattern=pattern,
    type_annotation=_annotation(tree, let_stmt),
  )


EXTRACTORS: Dict[UnsafeIdiom, Extractor] = {
  UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER: extract_buffer,
  UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER: extract_copy_within,
  UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS: extract_copy_from_slice,
  UnsafeIdiom.UNCHECKED_INDEX_READ: extract_checked_index,
  UnsafeIdiom.UNCHECKED_INDEX_WRITE: extract_checked_index,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION: extract_validated_string,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK: extract_validated_string,
}


def extract(match: IdiomMatch) -> Outcome[Ingredients]:
  """
  Dispatches to the extractor of the match's idiom.

  Args:
      match: A confirmed match.

  Returns:
      The idiom's ingredients, or NotApplicable.
  """
  return EXTRACTORS[match.idiom](match)
