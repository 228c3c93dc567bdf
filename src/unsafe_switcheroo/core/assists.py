"""
Assist Registration and Text Edits.

The editing collaborator. Rewrites are proposed as `Assist` records holding an
atomic `TextEdit`; the consumer shows them as quick-fixes and applies the
chosen one verbatim.

Registration follows a builder-closure protocol::

    assists.add("convert_unsafe_to_safe", AssistKind.REFACTOR_REWRITE, label, target,
                lambda edit: edit.replace(rng, text))

The closure receives a `SourceChangeBuilder` and records delete / insert /
replace operations. Overlapping operations are rejected when the edit is built.
"""

from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from unsafe_switcheroo.enums import AssistKind, UnsafeIdiom
from unsafe_switcheroo.syntax.tree import TextRange


class OverlappingEditError(ValueError):
  """Raised when two operations of one edit touch the same text."""


class Indel(BaseModel):
  """A single insertion-deletion: replace `range` with `insert`."""

  model_config = ConfigDict(frozen=True)

  range: TextRange
  insert: str = ""


def _sort_key(indel: Indel):
  # Pure insertions go before a deletion starting at the same offset.
  return (indel.range.start, indel.range.end)


def _check_disjoint(indels: List[Indel]) -> None:
  for prev, cur in zip(indels, indels[1:]):
    if prev.range.end > cur.range.start:
      raise OverlappingEditError(f"Edit operations overlap at {prev.range} and {cur.range}")


class TextEdit(BaseModel):
  """
  An atomic, ordered set of non-overlapping indels.
  """

  model_config = ConfigDict(frozen=True)

  indels: List[Indel] = Field(default_factory=list)

  @classmethod
  def from_indels(cls, indels: Iterable[Indel]) -> "TextEdit":
    """
    Sorts and validates indels.

    Raises:
        OverlappingEditError: If any two indels overlap.
    """
    ordered = sorted(indels, key=_sort_key)
    _check_disjoint(ordered)
    return cls(indels=ordered)

  def union(self, other: "TextEdit") -> "TextEdit":
    """
    Combines two edits into one.

    Raises:
        OverlappingEditError: If the edits touch the same text.
    """
    return TextEdit.from_indels([*self.indels, *other.indels])

  def apply(self, code: str) -> str:
    """
    Applies the edit to source text.

    Args:
        code: The document the edit was computed against.

    Returns:
        str: The edited document.
    """
    source = code.encode("utf-8")
    out = []
    cursor = 0
    for indel in self.indels:
      out.append(source[cursor : indel.range.start])
      out.append(indel.insert.encode("utf-8"))
      cursor = max(cursor, indel.range.end)
    out.append(source[cursor:])
    return b"".join(out).decode("utf-8")


class SourceChangeBuilder:
  """
  Collects edit operations inside an assist closure.
  """

  def __init__(self) -> None:
    self._indels: List[Indel] = []

  def delete(self, text_range: TextRange) -> None:
    self._indels.append(Indel(range=text_range))

  def insert(self, offset: int, text: str) -> None:
    self._indels.append(Indel(range=TextRange.empty(offset), insert=text))

  def replace(self, text_range: TextRange, text: str) -> None:
    self._indels.append(Indel(range=text_range, insert=text))

  def finish(self) -> TextEdit:
    return TextEdit.from_indels(self._indels)


class Assist(BaseModel):
  """
  A selectable quick-fix.

  Attributes:
      id: Stable assist identifier.
      kind: Assist category.
      label: User-facing title.
      target: Range the assist is anchored at.
      edit: The atomic text change.
      idiom: The rewritten idiom, when produced by the unsafe rewriter.
  """

  model_config = ConfigDict(frozen=True)

  id: str
  kind: AssistKind
  label: str
  target: TextRange
  edit: TextEdit
  idiom: Optional[UnsafeIdiom] = None


class Assists:
  """
  Accumulator for the assists offered in one request.
  """

  def __init__(self) -> None:
    self._buf: List[Assist] = []

  def add(
    self,
    assist_id: str,
    kind: AssistKind,
    label: str,
    target: TextRange,
    build: Callable[[SourceChangeBuilder], None],
    idiom: Optional[UnsafeIdiom] = None,
  ) -> Assist:
    """
    Registers an assist whose edit is produced by `build`.

    Args:
        assist_id: Stable identifier (e.g. `convert_unsafe_to_safe`).
        kind: Assist category.
        label: User-facing title.
        target: Anchor range.
        build: Closure recording operations on a `SourceChangeBuilder`.
        idiom: Optional idiom tag.

    Returns:
        Assist: The registered assist.

    Raises:
        OverlappingEditError: If the closure recorded overlapping operations.
    """
    builder = SourceChangeBuilder()
    build(builder)
    assist = Assist(id=assist_id, kind=kind, label=label, target=target, edit=builder.finish(), idiom=idiom)
    self._buf.append(assist)
    return assist

  def finish(self) -> List[Assist]:
    """The assists registered so far, in registration order."""
    return list(self._buf)
