"""
Tests for the Tracing System.
"""

from unsafe_switcheroo.core.tracer import TraceEventType, TraceLogger


def test_phase_nesting():
  logger = TraceLogger()

  p1 = logger.start_phase("Parent")
  logger.start_phase("Child")
  logger.end_phase()  # End Child
  logger.end_phase()  # End Parent

  events = logger.export()

  # 4 events: Start P, Start C, End C, End P
  assert len(events) == 4
  assert events[0]["type"] == TraceEventType.PHASE_START
  assert events[1]["parent_id"] == p1
  assert events[2]["type"] == TraceEventType.PHASE_END


def test_end_phase_without_start_is_noop():
  logger = TraceLogger()
  logger.end_phase()
  assert logger.export() == []


def test_trace_logging_integration():
  """Verify log_match records correct metadata."""
  logger = TraceLogger()
  logger.log_match("unchecked_index_read", "get_unchecked", "12..48")

  events = logger.export()
  assert len(events) == 1
  assert events[0]["type"] == TraceEventType.IDIOM_MATCH
  assert events[0]["description"] == "Matched get_unchecked -> unchecked_index_read"
  assert events[0]["metadata"] == {"idiom": "unchecked_index_read", "trigger": "get_unchecked", "region": "12..48"}


def test_events_are_parented_to_active_phase():
  logger = TraceLogger()
  phase = logger.start_phase("Classification")
  logger.log_inspection("set_len", "missing_read", "buf")
  logger.log_edit("collapse", "unsafe { .. }", "v.copy_within(0..3, 3);")
  logger.end_phase()

  inspection, edit = logger.events[1:3]
  assert inspection.parent_id == phase
  assert inspection.metadata == {"outcome": "missing_read", "detail": "buf"}
  assert edit.type == TraceEventType.PLANNED_EDIT
  assert edit.metadata["after"] == "v.copy_within(0..3, 3);"


def test_loggers_are_independent():
  a = TraceLogger()
  b = TraceLogger()
  a.log_warning("syntax")
  assert len(a.events) == 1
  assert b.events == []
