"""
Data structures representing the output of a whole-document rewrite.

This module defines the `RewriteResult` Pydantic model, which encapsulates
the rewritten code, the assists that were applied, any errors encountered,
and the execution trace logs.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from unsafe_switcheroo.core.assists import Assist


class RewriteResult(BaseModel):
  """
  Container for the results of a rewrite job.
  """

  code: str = Field(default="", description="The rewritten source code.")
  applied: List[Assist] = Field(default_factory=list, description="Assists applied, in document order.")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(
    default=True,
    description="True if the pipeline completed without fatal crashes.",
  )
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

  @property
  def changed(self) -> bool:
    return len(self.applied) > 0
