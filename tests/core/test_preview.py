"""
Tests for the hover preview rendering.
"""

from unsafe_switcheroo.core.classifier import classify
from unsafe_switcheroo.core.extractors import extract
from unsafe_switcheroo.core.generators import generate
from unsafe_switcheroo.core.markup import markup, plain
from unsafe_switcheroo.core.preview import DESCRIPTION, addition, removal, render_preview, render_suggestion

BUFFER_CODE = """
fn fill(cap: usize) {
    let mut buffer = Vec::with_capacity(cap);
    unsafe { buffer.set_len(cap); }
    consume(&buffer);
}
"""


def _match(region):
  match = next(classify(region))
  return match, generate(match.idiom, extract(match))


def test_markers():
  assert removal("x;") == "**```---```** **~~```x;```~~**"
  assert addition("y;") == "**```+++```** **```y;```**"
  assert removal("x;", markdown=False) == "--- x;"
  assert addition("y;", markdown=False) == "+++ y;"


def test_markup_layout():
  assert markup("body", "title") == "```rust\ntitle\n```\n___\n\nbody"
  assert markup("body", "title", "std::ptr") == "```rust\nstd::ptr\n```\n\n```rust\ntitle\n```\n___\n\nbody"
  assert markup(None, "title") == "```rust\ntitle\n```"


def test_plain_layout():
  assert plain("body", "abc") == "abc\n---\n\nbody"


def test_suggestion_lists_companion_then_statement(region_of):
  match, generated = _match(region_of(BUFFER_CODE))
  body = render_suggestion(match, generated)
  assert body == (
    "Original Code: \n\n"
    "**```---```** **~~```let mut buffer = Vec::with_capacity(cap);```~~**\n\n"
    "**```---```** **~~```unsafe { buffer.set_len(cap); }```~~**\n\n"
    "Modified Code: \n\n"
    "**```+++```** **```let mut buffer = vec![0; cap];```**"
  )


def test_preview_markdown_wraps_title(region_of):
  match, generated = _match(region_of(BUFFER_CODE))
  block = render_preview(match, generated)
  assert block.startswith(f"```rust\n{DESCRIPTION}\n```\n___\n\nOriginal Code: ")


def test_preview_plain(region_of):
  region = region_of(
    """
    fn f(vec: &mut Vec<i32>) {
        unsafe { ptr::copy(&vec[0] as *const i32, &mut vec[3] as *mut i32, 3); }
    }
    """
  )
  match, generated = _match(region)
  block = render_preview(match, generated, markdown=False)
  assert "**" not in block
  assert "--- unsafe { ptr::copy(&vec[0] as *const i32, &mut vec[3] as *mut i32, 3); }" in block
  assert block.endswith("+++ vec.copy_within(0..3, 3);")


def test_preview_does_not_touch_source(region_of):
  region = region_of(BUFFER_CODE)
  before = region.tree.code
  match, generated = _match(region)
  render_preview(match, generated)
  assert region.tree.code == before
