"""
Preview Renderer.

Read-only rendering of a proposed rewrite for hover display::

    Original Code:

    --- let mut buffer = Vec::with_capacity(cap);

    --- unsafe { buffer.set_len(cap); }

    Modified Code:

    +++ let mut buffer = vec![0; cap];

The markdown rendering wraps removals as `**```---```** **~~```..```~~**` and
additions as `**```+++```** **```..```**`. The block is handed to `markup` with
the suggestion title. Nothing here touches the document text.
"""

from typing import List

from unsafe_switcheroo.core.classifier import IdiomMatch
from unsafe_switcheroo.core.markup import markup, plain
from unsafe_switcheroo.core.outcome import NotApplicable, Outcome
from unsafe_switcheroo.core.planner import offending_statement

DESCRIPTION = "Code Suggestion: translating unsafe to safe code"
ORIGINAL_HEADING = "Original Code: \n\n"
MODIFIED_HEADING = "Modified Code: \n\n"


def removal(text: str, markdown: bool = True) -> str:
  if markdown:
    return f"**```---```** **~~```{text}```~~**"
  return f"--- {text}"


def addition(text: str, markdown: bool = True) -> str:
  if markdown:
    return f"**```+++```** **```{text}```**"
  return f"+++ {text}"


def render_suggestion(match: IdiomMatch, generated: str, markdown: bool = True) -> Outcome[str]:
  """
  Renders the Original / Modified body for one match.

  Args:
      match: A confirmed match.
      generated: Output of the idiom's generator.
      markdown: Markdown markers when True, `---` / `+++` prefixes otherwise.

  Returns:
      str: The suggestion body, or NotApplicable if the offending statement
      cannot be resolved.
  """
  tree = match.tree
  statement = offending_statement(match)
  if isinstance(statement, NotApplicable):
    return statement

  removed: List[str] = []
  if match.reservation is not None:
    removed.append(removal(tree.text(match.reservation), markdown))
  removed.append(removal(f"unsafe {{ {tree.text(statement)} }}", markdown))

  return ORIGINAL_HEADING + "\n\n".join(removed) + "\n\n" + MODIFIED_HEADING + addition(generated, markdown)


def render_preview(match: IdiomMatch, generated: str, markdown: bool = True) -> Outcome[str]:
  """
  Full hover block: title plus suggestion body.

  Args:
      match: A confirmed match.
      generated: Output of the idiom's generator.
      markdown: Rendering mode.

  Returns:
      str: The renderable block, or NotApplicable.
  """
  body = render_suggestion(match, generated, markdown)
  if not isinstance(body, str):
    return body
  if markdown:
    return markup(body, DESCRIPTION)
  return plain(body, DESCRIPTION)
