"""
Rewrite Trace Logger.

Each engine request owns one `TraceLogger`. It collects:

- phase boundaries (whole pipeline, per-region classification),
- confirmed idiom matches, e.g. `buffer.set_len` as reserved_then_uninitialized_buffer,
- planned edits with the text before and after,
- inspections: candidates dropped along the way, with their rejection reason,
- analysis warnings (recovered syntax errors, skipped overlapping edits).

`export()` turns the record into plain dicts for `fix --json-trace`.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  IDIOM_MATCH = "idiom_match"
  PLANNED_EDIT = "planned_edit"
  ANALYSIS_WARNING = "analysis_warning"
  INSPECTION = "inspection"


@dataclass
class TraceEvent:
  """
  One entry of the request trace.

  Attributes:
      id: Unique event id (phase starts hand theirs out as the phase id).
      type: Event category.
      timestamp: Wall clock time of the event.
      description: Short human readable summary.
      parent_id: Phase the event belongs to; for `PHASE_END` the phase closed.
      metadata: Event specific payload.
  """

  id: str
  type: TraceEventType
  timestamp: float
  description: str
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Append-only event record for a single request.
  """

  def __init__(self) -> None:
    self._events: List[TraceEvent] = []
    self._phases: List[str] = []

  @property
  def events(self) -> List[TraceEvent]:
    return list(self._events)

  @property
  def current_phase(self) -> Optional[str]:
    return self._phases[-1] if self._phases else None

  def _record(
    self,
    kind: TraceEventType,
    description: str,
    metadata: Optional[Dict[str, Any]] = None,
    parent_id: Optional[str] = None,
    event_id: Optional[str] = None,
  ) -> TraceEvent:
    event = TraceEvent(
      id=event_id or uuid.uuid4().hex,
      type=kind,
      timestamp=time.time(),
      description=description,
      parent_id=parent_id if parent_id is not None else self.current_phase,
      metadata=metadata or {},
    )
    self._events.append(event)
    return event

  def start_phase(self, name: str, description: str = "") -> str:
    """
    Opens a phase nested in the current one.

    Args:
        name: Phase title, e.g. 'Classification'.
        description: Extra context, e.g. the region range.

    Returns:
        str: The phase id.
    """
    event = self._record(TraceEventType.PHASE_START, name, {"detail": description})
    self._phases.append(event.id)
    return event.id

  def end_phase(self) -> None:
    """Closes the innermost open phase. Does nothing when none is open."""
    if not self._phases:
      return
    closed = self._phases.pop()
    self._record(TraceEventType.PHASE_END, "End Phase", parent_id=closed)

  def log_match(self, idiom: str, trigger: str, region: str) -> None:
    self._record(
      TraceEventType.IDIOM_MATCH,
      f"Matched {trigger} -> {idiom}",
      {"idiom": idiom, "trigger": trigger, "region": region},
    )

  def log_edit(self, shape: str, before: str, after: str) -> None:
    """Records the text a planned edit removes and the text it writes."""
    self._record(TraceEventType.PLANNED_EDIT, f"Planned {shape}", {"before": before, "after": after})

  def log_warning(self, message: str) -> None:
    self._record(TraceEventType.ANALYSIS_WARNING, message, {"level": "warning"})

  def log_inspection(self, node_str: str, outcome: str, detail: str = "") -> None:
    """Records a candidate that was looked at and left unchanged."""
    self._record(TraceEventType.INSPECTION, f"Inspecting '{node_str}'", {"outcome": outcome, "detail": detail})

  def export(self) -> List[Dict[str, Any]]:
    """
    Serializable view of the trace.

    Returns:
        List[Dict[str, Any]]: One dict per event, in recording order.
    """
    return [asdict(event) for event in self._events]
