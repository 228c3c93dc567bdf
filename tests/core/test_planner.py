"""
Tests for the Edit Planner.

Covers the single-statement collapse, the multi-statement excise-and-hoist,
the companion rewrite, and the structural preconditions.
"""

from unsafe_switcheroo.core.assists import Assists
from unsafe_switcheroo.core.classifier import classify
from unsafe_switcheroo.core.extractors import extract
from unsafe_switcheroo.core.generators import generate
from unsafe_switcheroo.core.outcome import NotApplicable
from unsafe_switcheroo.core.planner import ASSIST_ID, ASSIST_LABEL, EditShape, plan_edit, register
from unsafe_switcheroo.enums import AssistKind, Rejection
from unsafe_switcheroo.syntax.tree import SyntaxTree


def _plan(region):
  match = next(classify(region))
  generated = generate(match.idiom, extract(match))
  return match, generated, plan_edit(match, generated)


def _apply(region, plan):
  assists = Assists()
  assist = register(assists, plan)
  return assist, assist.edit.apply(region.tree.code)


def test_single_statement_collapses_region(region_of):
  region = region_of(
    """
    fn f(vec: &mut Vec<i32>) {
        unsafe { ptr::copy(&vec[0] as *const i32, &mut vec[3] as *mut i32, 3); }
    }
    """
  )
  _, generated, plan = _plan(region)
  assert plan.shape == EditShape.COLLAPSE
  assert plan.target == region.range
  assert plan.replacement == generated == "vec.copy_within(0..3, 3);"

  assist, out = _apply(region, plan)
  assert assist.id == ASSIST_ID
  assert assist.label == ASSIST_LABEL
  assert assist.kind == AssistKind.REFACTOR_REWRITE
  assert assist.target == region.range
  assert out == "fn f(vec: &mut Vec<i32>) {\n    vec.copy_within(0..3, 3);\n}\n"


def test_multi_statement_excises_and_hoists(region_of):
  region = region_of(
    """
    fn f(src: &[u8], dst: &mut [u8], n: usize) {
        let before = n;
        unsafe {
            ptr::copy_nonoverlapping(src[2..4].as_ptr(), dst[2..4].as_mut_ptr(), 2);
            log(before);
        }
    }
    """
  )
  _, _, plan = _plan(region)
  assert plan.shape == EditShape.EXCISE_AND_HOIST
  statement_text = "ptr::copy_nonoverlapping(src[2..4].as_ptr(), dst[2..4].as_mut_ptr(), 2);"
  assert region.tree.slice(plan.target) == statement_text
  assert plan.insert_at < region.node.start_byte
  assert plan.insert_text == "    dst[2..4].copy_from_slice(&src[2..4]);\n"

  _, out = _apply(region, plan)
  assert "    let before = n;\n    dst[2..4].copy_from_slice(&src[2..4]);\n    unsafe {\n" in out
  assert "log(before);" in out
  assert "copy_nonoverlapping" not in out
  assert not SyntaxTree.parse(out).has_errors


def test_companion_rewrite_single_statement(region_of):
  region = region_of(
    """
    fn fill(cap: usize) {
        let mut buffer = Vec::with_capacity(cap);
        unsafe { buffer.set_len(cap); }
        consume(&buffer);
    }
    """
  )
  match, _, plan = _plan(region)
  assert plan.shape == EditShape.COLLAPSE_WITH_COMPANION
  assert plan.target == region.range
  assert region.tree.slice(plan.companion) == "let mut buffer = Vec::with_capacity(cap);"
  assert plan.companion_text == "let mut buffer = vec![0; cap];"

  _, out = _apply(region, plan)
  assert "let mut buffer = vec![0; cap];" in out
  assert "set_len" not in out
  assert "unsafe" not in out
  assert "consume(&buffer);" in out


def test_companion_rewrite_multi_statement(region_of):
  region = region_of(
    """
    fn fill(buffer: &mut Vec<u8>, n: usize) {
        buffer.reserve(n);
        unsafe {
            buffer.set_len(n);
            touch();
        }
        send(buffer);
    }
    """
  )
  _, _, plan = _plan(region)
  assert plan.shape == EditShape.EXCISE_WITH_COMPANION
  assert region.tree.slice(plan.target) == "buffer.set_len(n);"

  _, out = _apply(region, plan)
  assert "buffer.resize(n, 0);" in out
  assert "buffer.reserve(n);" not in out
  assert "touch();" in out


def test_region_in_let_cannot_collapse(region_of):
  region = region_of(
    """
    fn f(v: &mut Vec<i32>) {
        let r = unsafe { ptr::copy(&v[0], &mut v[1], 1) };
    }
    """
  )
  _, _, plan = _plan(region)
  assert isinstance(plan, NotApplicable)
  assert plan.reason == Rejection.REGION_NOT_STATEMENT


def test_hoist_requires_previous_sibling(region_of):
  region = region_of(
    """
    fn f(v: &[i32]) {
        unsafe {
            let x = v.get_unchecked(0);
            show(x);
        }
    }
    """
  )
  _, _, plan = _plan(region)
  assert isinstance(plan, NotApplicable)
  assert plan.reason == Rejection.NO_ANCHOR


def test_hoist_requires_line_boundary(region_of):
  region = region_of(
    """
    fn f(v: &[i32]) {
        let y = 1; unsafe { let x = v.get_unchecked(0); show(x, y); }
    }
    """
  )
  _, _, plan = _plan(region)
  assert isinstance(plan, NotApplicable)
  assert plan.reason == Rejection.NO_LINE_BOUNDARY


def test_nested_call_is_not_a_region_statement(region_of):
  region = region_of(
    """
    fn f(v: &mut [i32]) {
        let y = 1;
        unsafe {
            if y > 0 { ptr::copy(&v[0], &mut v[1], 1); }
        }
    }
    """
  )
  _, _, plan = _plan(region)
  assert isinstance(plan, NotApplicable)
  assert plan.reason == Rejection.NOT_A_REGION_STATEMENT
