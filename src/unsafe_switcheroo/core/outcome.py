"""
Stage outcomes.

Each stage of the pipeline (classify -> extract -> generate -> plan) returns
either its concrete value or a `NotApplicable` record naming why the candidate
was discarded. Callers test with `isinstance(result, NotApplicable)`.
"""

import logging
from dataclasses import dataclass
from typing import TypeVar, Union

from unsafe_switcheroo.enums import Rejection

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class NotApplicable:
  """
  A typed "no applicable rewrite" outcome.

  Attributes:
      reason: Machine-readable rejection category.
      detail: Human-readable context (e.g. the offending node text).
  """

  reason: Rejection
  detail: str = ""

  def __bool__(self) -> bool:
    return False

  def __str__(self) -> str:
    if self.detail:
      return f"{self.reason.value}: {self.detail}"
    return self.reason.value


Outcome = Union[T, NotApplicable]


def reject(reason: Rejection, detail: str = "") -> NotApplicable:
  """
  Builds a `NotApplicable` and records it at debug level.

  Args:
      reason: The rejection category.
      detail: Optional context.

  Returns:
      NotApplicable: The outcome to hand back to the caller.
  """
  outcome = NotApplicable(reason, detail)
  logger.debug("Candidate rejected (%s)", outcome)
  return outcome
