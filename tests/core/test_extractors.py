"""
Tests for the Ingredient Extractors.

Each extractor reads fixed argument positions and returns rendered text or a
typed rejection when the structure does not fit.
"""

from unsafe_switcheroo.core.classifier import classify
from unsafe_switcheroo.core.extractors import (
  EXTRACTORS,
  BufferIngredients,
  CheckedIndexIngredients,
  CopyFromSliceIngredients,
  CopyWithinIngredients,
  ValidatedStringIngredients,
  extract,
  peel_to_index,
)
from unsafe_switcheroo.core.outcome import NotApplicable
from unsafe_switcheroo.enums import Rejection, UnsafeIdiom


def _first(region):
  return extract(next(classify(region)))


def test_extractor_table_is_exhaustive():
  assert set(EXTRACTORS) == set(UnsafeIdiom)


def test_buffer_from_let_reservation(region_of):
  out = _first(
    region_of(
      """
      fn f(cap: usize) {
          let mut buffer: Vec<u8> = Vec::with_capacity(cap);
          unsafe { buffer.set_len(cap * 2); }
          consume(&buffer);
      }
      """
    )
  )
  assert out == BufferIngredients(
    buffer="buffer", count="cap * 2", pattern="buffer", type_annotation="Vec<u8>", reserved_by_method=False
  )


def test_buffer_from_reserve_call(region_of):
  out = _first(
    region_of(
      """
      fn f(buffer: &mut Vec<u8>, n: usize) {
          buffer.reserve(n);
          unsafe { buffer.set_len(n); }
          send(buffer);
      }
      """
    )
  )
  assert isinstance(out, BufferIngredients)
  assert out.reserved_by_method
  assert out.count == "n"


def test_copy_within_peels_casts_and_references(region_of):
  out = _first(
    region_of(
      """
      fn f(vec: &mut Vec<i32>) {
          unsafe { ptr::copy(&vec[0] as *const i32, &mut vec[3] as *mut i32, 3); }
      }
      """
    )
  )
  assert out == CopyWithinIngredients(base="vec", start="0", end="3", count="3")


def test_copy_within_peels_pointer_methods(region_of):
  out = _first(
    region_of(
      """
      fn f(data: &mut [u8], i: usize, n: usize) {
          unsafe { std::ptr::copy(data[i].as_ptr(), (data[i + 1]).as_mut_ptr(), n); }
      }
      """
    )
  )
  assert out == CopyWithinIngredients(base="data", start="i", end="i + 1", count="n")


def test_copy_within_mismatched_bases(region_of):
  out = _first(
    region_of(
      """
      fn f(a: &mut [i32], b: &mut [i32]) {
          unsafe { ptr::copy(&a[0], &mut b[1], 1); }
      }
      """
    )
  )
  assert isinstance(out, NotApplicable)
  assert out.reason == Rejection.MISMATCHED_BASES


def test_copy_within_requires_index_expressions(region_of):
  out = _first(
    region_of(
      """
      fn f(p: *const i32, q: *mut i32) {
          unsafe { ptr::copy(p, q, 1); }
      }
      """
    )
  )
  assert out.reason == Rejection.NOT_AN_INDEX_EXPRESSION


def test_copy_within_wrong_arity(region_of):
  out = _first(
    region_of(
      """
      fn f(v: &mut [i32]) {
          unsafe { ptr::copy(&v[0], &mut v[1]); }
      }
      """
    )
  )
  assert out.reason == Rejection.WRONG_ARITY


def test_copy_from_slice_with_count(region_of):
  out = _first(
    region_of(
      """
      fn f(src: &[u8], dst: &mut [u8]) {
          unsafe { ptr::copy_nonoverlapping(src[2..4].as_ptr(), dst[2..4].as_mut_ptr(), 2); }
      }
      """
    )
  )
  assert out == CopyFromSliceIngredients(src="src[2..4]", dst="dst[2..4]", count="2")


def test_copy_from_slice_without_count(region_of):
  out = _first(
    region_of(
      """
      fn f(src: &[u8], dst: &mut [u8]) {
          unsafe { ptr::copy_nonoverlapping(&src[..], &mut dst[..]); }
      }
      """
    )
  )
  assert isinstance(out, CopyFromSliceIngredients)
  assert out.count is None


def test_checked_index_read(region_of):
  out = _first(
    region_of(
      """
      fn f(v: &[i32], i: usize) {
          unsafe { let x = v.get_unchecked(i); }
      }
      """
    )
  )
  assert out == CheckedIndexIngredients(pattern="x", receiver="v", index="i", mutable=False)


def test_checked_index_write_keeps_mut_binding(region_of):
  out = _first(
    region_of(
      """
      fn f(v: &mut [i32]) {
          unsafe { let mut slot = v.get_unchecked_mut(2); }
      }
      """
    )
  )
  assert out == CheckedIndexIngredients(pattern="mut slot", receiver="v", index="2", mutable=True)


def test_checked_index_outside_let(region_of):
  out = _first(
    region_of(
      """
      fn f(v: &[i32]) {
          unsafe { use_it(v.get_unchecked(0)); }
      }
      """
    )
  )
  assert out.reason == Rejection.UNSUPPORTED_POSITION


def test_validated_string_binding(region_of):
  out = _first(
    region_of(
      """
      fn f(bytes: Vec<u8>) {
          unsafe { let name: CString = std::ffi::CString::from_vec_unchecked(bytes); }
      }
      """
    )
  )
  assert out == ValidatedStringIngredients(
    argument="bytes", path_prefix="std::ffi::", pattern="name", type_annotation="CString"
  )
  assert out.is_binding


def test_validated_string_assignment_operand(region_of):
  out = _first(
    region_of(
      """
      fn f(raw: &[u8]) {
          let s;
          unsafe { s = CStr::from_bytes_with_nul_unchecked(raw); }
      }
      """
    )
  )
  assert out == ValidatedStringIngredients(argument="raw", lhs="s", operator="=")
  assert not out.is_binding


def test_validated_string_unsupported_position(region_of):
  out = _first(
    region_of(
      """
      fn f(bytes: Vec<u8>) {
          unsafe { takes(CString::from_vec_unchecked(bytes)); }
      }
      """
    )
  )
  assert out.reason == Rejection.UNSUPPORTED_POSITION


def test_peel_to_index_stops_at_other_calls(rust):
  tree = rust("fn f() { g(v[0].offset(1)); }")
  call = next(n for n in tree.descendants(tree.root) if n.type == "call_expression" and tree.text(n).startswith("v[0]"))
  assert peel_to_index(tree, call) is None
