"""
Tests for the Code Generators.

Generators are pure functions of their ingredients; every output is a single
statement terminated by `;`.
"""

import pytest

from unsafe_switcheroo.core.extractors import (
  BufferIngredients,
  CheckedIndexIngredients,
  CopyFromSliceIngredients,
  CopyWithinIngredients,
  ValidatedStringIngredients,
)
from unsafe_switcheroo.core.generators import GENERATORS, GeneratorOptions, generate
from unsafe_switcheroo.enums import UnsafeIdiom
from unsafe_switcheroo.syntax import kinds
from unsafe_switcheroo.syntax.tree import SyntaxTree


def test_generator_table_is_exhaustive():
  assert set(GENERATORS) == set(UnsafeIdiom)


@pytest.mark.parametrize(
  "idiom, ingredients, expected",
  [
    (
      UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER,
      BufferIngredients(buffer="buffer", count="cap", pattern="buffer"),
      "let mut buffer = vec![0; cap];",
    ),
    (
      UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER,
      BufferIngredients(buffer="buf", count="n", pattern="buf", type_annotation="Vec<u8>"),
      "let mut buf: Vec<u8> = vec![0; n];",
    ),
    (
      UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER,
      BufferIngredients(buffer="self.buf", count="n", pattern="self.buf", reserved_by_method=True),
      "self.buf.resize(n, 0);",
    ),
    (
      UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER,
      CopyWithinIngredients(base="vec", start="0", end="3", count="3"),
      "vec.copy_within(0..3, 3);",
    ),
    (
      UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS,
      CopyFromSliceIngredients(src="src[2..4]", dst="dst[2..4]", count="2"),
      "dst[2..4].copy_from_slice(&src[2..4]);",
    ),
    (
      UnsafeIdiom.UNCHECKED_INDEX_READ,
      CheckedIndexIngredients(pattern="x", receiver="v", index="i"),
      "let x = v.get(i);",
    ),
    (
      UnsafeIdiom.UNCHECKED_INDEX_WRITE,
      CheckedIndexIngredients(pattern="mut slot", receiver="v", index="2", mutable=True),
      "let mut slot = v.get_mut(2);",
    ),
    (
      UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION,
      ValidatedStringIngredients(argument="bytes", pattern="s"),
      "let s = CString::new(bytes).unwrap();",
    ),
    (
      UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION,
      ValidatedStringIngredients(argument="bytes", path_prefix="std::ffi::", pattern="s", type_annotation="CString"),
      "let s: CString = std::ffi::CString::new(bytes).unwrap();",
    ),
    (
      UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK,
      ValidatedStringIngredients(argument="raw", lhs="s"),
      "s = CStr::from_bytes_with_nul(raw).unwrap();",
    ),
  ],
)
def test_generated_text(idiom, ingredients, expected):
  assert generate(idiom, ingredients) == expected


def test_options_change_fill_and_unwrap():
  options = GeneratorOptions(zero_fill_value="0u8", validated_unwrap="?")
  buf = BufferIngredients(buffer="b", count="n", pattern="b")
  assert generate(UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER, buf, options) == "let mut b = vec![0u8; n];"

  cstr = ValidatedStringIngredients(argument="raw", pattern="c")
  assert generate(UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK, cstr, options) == (
    "let c = CStr::from_bytes_with_nul(raw)?;"
  )


def test_generators_are_deterministic():
  ingredients = CopyWithinIngredients(base="v", start="a", end="b", count="c")
  first = generate(UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER, ingredients)
  assert first == generate(UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER, ingredients)


STATEMENT_SHAPES = [
  (
    UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER,
    BufferIngredients(buffer="buffer", count="cap", pattern="buffer"),
    kinds.LET_DECLARATION,
  ),
  (
    UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER,
    BufferIngredients(buffer="self.buf", count="n + 1", pattern="self.buf", reserved_by_method=True),
    kinds.EXPRESSION_STATEMENT,
  ),
  (
    UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER,
    CopyWithinIngredients(base="vec", start="i", end="i + 2", count="len - i"),
    kinds.EXPRESSION_STATEMENT,
  ),
  (
    UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS,
    CopyFromSliceIngredients(src="src[..n]", dst="dst[..n]", count="n"),
    kinds.EXPRESSION_STATEMENT,
  ),
  (
    UnsafeIdiom.UNCHECKED_INDEX_READ,
    CheckedIndexIngredients(pattern="x", receiver="self.items", index="i"),
    kinds.LET_DECLARATION,
  ),
  (
    UnsafeIdiom.UNCHECKED_INDEX_WRITE,
    CheckedIndexIngredients(pattern="mut slot", receiver="v", index="2", mutable=True),
    kinds.LET_DECLARATION,
  ),
  (
    UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION,
    ValidatedStringIngredients(argument="bytes", path_prefix="std::ffi::", pattern="s", type_annotation="CString"),
    kinds.LET_DECLARATION,
  ),
  (
    UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION,
    ValidatedStringIngredients(argument="bytes.clone()", lhs="self.name"),
    kinds.EXPRESSION_STATEMENT,
  ),
  (
    UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK,
    ValidatedStringIngredients(argument="raw", pattern="c", type_annotation="&CStr"),
    kinds.LET_DECLARATION,
  ),
  (
    UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK,
    ValidatedStringIngredients(argument="&data[..]", lhs="c"),
    kinds.EXPRESSION_STATEMENT,
  ),
]


def test_statement_shapes_cover_every_generator():
  assert {idiom for idiom, _, _ in STATEMENT_SHAPES} == set(GENERATORS)


@pytest.mark.parametrize("idiom, ingredients, kind", STATEMENT_SHAPES)
@pytest.mark.parametrize("options", [GeneratorOptions(), GeneratorOptions(zero_fill_value="0u8", validated_unwrap="?")])
def test_generated_statements_parse(idiom, ingredients, kind, options):
  statement = generate(idiom, ingredients, options)
  tree = SyntaxTree.parse(f"fn f() {{ {statement} }}")
  assert not tree.has_errors, statement

  body = tree.named_children(tree.root)[0].child_by_field_name("body")
  parsed = tree.statements(body)
  assert [node.type for node in parsed] == [kind]
  assert tree.text(parsed[0]) == statement
