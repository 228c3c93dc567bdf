"""
Code Generators.

Pure, deterministic text rendering: one function per catalog entry, fed only
with the ingredients extracted for a match (never with live source). Every
generator ends its statement with `;`. Trailing line breaks for standalone
insertions are the Edit Planner's business.
"""

from typing import Callable, Dict

from pydantic import BaseModel, ConfigDict, Field

from unsafe_switcheroo.core.extractors import (
  BufferIngredients,
  CheckedIndexIngredients,
  CopyFromSliceIngredients,
  CopyWithinIngredients,
  Ingredients,
  ValidatedStringIngredients,
)
from unsafe_switcheroo.enums import UnsafeIdiom


class GeneratorOptions(BaseModel):
  """Rendering knobs, populated from `RuntimeConfig`."""

  model_config = ConfigDict(frozen=True)

  zero_fill_value: str = Field("0", description="Element used to zero-fill reserved buffers.")
  validated_unwrap: str = Field(".unwrap()", description="Suffix applied to validated constructors.")


DEFAULT_OPTIONS = GeneratorOptions()


def generate_zero_filled_buffer(ingredients: BufferIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  """
  Renders the initialised replacement for a reserved buffer.

  `let mut buf = Vec::with_capacity(cap);` becomes
  `let mut buf = vec![0; <count>];`. A `buf.reserve(n);` companion becomes
  `buf.resize(<count>, 0);`.
  """
  zero = options.zero_fill_value
  if ingredients.reserved_by_method:
    return f"{ingredients.buffer}.resize({ingredients.count}, {zero});"

  annotation = f": {ingredients.type_annotation}" if ingredients.type_annotation else ""
  return f"let mut {ingredients.pattern}{annotation} = vec![{zero}; {ingredients.count}];"


def generate_copy_within(ingredients: CopyWithinIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  return f"{ingredients.base}.copy_within({ingredients.start}..{ingredients.end}, {ingredients.count});"


def generate_copy_from_slice(ingredients: CopyFromSliceIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  return f"{ingredients.dst}.copy_from_slice(&{ingredients.src});"


def generate_checked_index(ingredients: CheckedIndexIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  """`let <pattern> = <receiver>.get(<index>);`, `get_mut` when mutable."""
  accessor = "get_mut" if ingredients.mutable else "get"
  return f"let {ingredients.pattern} = {ingredients.receiver}.{accessor}({ingredients.index});"


def _validated(constructor: str, ingredients: ValidatedStringIngredients, options: GeneratorOptions) -> str:
  call = f"{ingredients.path_prefix}{constructor}({ingredients.argument}){options.validated_unwrap}"
  if ingredients.is_binding:
    annotation = f": {ingredients.type_annotation}" if ingredients.type_annotation else ""
    return f"let {ingredients.pattern}{annotation} = {call};"
  return f"{ingredients.lhs} {ingredients.operator} {call};"


def generate_cstring_new(ingredients: ValidatedStringIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  """Swaps `CString::from_vec_unchecked` for the nul-checking `CString::new`."""
  return _validated("CString::new", ingredients, options)


def generate_cstr_with_nul(ingredients: ValidatedStringIngredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  """
  Swaps `CStr::from_bytes_with_nul_unchecked` for `CStr::from_bytes_with_nul`,
  which checks that the only nul byte is the last one.
  """
  return _validated("CStr::from_bytes_with_nul", ingredients, options)


Generator = Callable[..., str]

GENERATORS: Dict[UnsafeIdiom, Generator] = {
  UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER: generate_zero_filled_buffer,
  UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER: generate_copy_within,
  UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS: generate_copy_from_slice,
  UnsafeIdiom.UNCHECKED_INDEX_READ: generate_checked_index,
  UnsafeIdiom.UNCHECKED_INDEX_WRITE: generate_checked_index,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION: generate_cstring_new,
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK: generate_cstr_with_nul,
}


def generate(idiom: UnsafeIdiom, ingredients: Ingredients, options: GeneratorOptions = DEFAULT_OPTIONS) -> str:
  """
  Dispatches to the generator of an idiom.

  Args:
      idiom: The catalog entry.
      ingredients: Output of the matching extractor.
      options: Rendering knobs.

  Returns:
      str: Replacement statement text, terminated by `;`.
  """
  return GENERATORS[idiom](ingredients, options)
