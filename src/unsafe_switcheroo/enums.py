"""
Enumerations for unsafe-switcheroo.

This module defines the closed catalog of recognised unsafe idioms together
with the canonical textual signatures used to spot them, and the reasons a
candidate can be rejected along the classify -> extract -> generate -> plan
pipeline.
"""

from enum import Enum


class UnsafeIdiom(str, Enum):
  """
  The Pattern Catalog.

  Each member is an unsafe-but-replaceable idiom. The canonical signature
  (see `signature`) is only ever used to *match* source text; it is never
  used to generate replacement code.
  """

  RESERVED_THEN_UNINITIALIZED_BUFFER = "reserved_then_uninitialized_buffer"
  RAW_RANGE_COPY_WITHIN_ONE_BUFFER = "raw_range_copy_within_one_buffer"
  RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS = "raw_non_overlapping_copy_between_buffers"
  UNCHECKED_INDEX_READ = "unchecked_index_read"
  UNCHECKED_INDEX_WRITE = "unchecked_index_write"
  RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION = "raw_bytes_to_validated_string_construction"
  RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK = "raw_bytes_to_validated_string_length_check"

  @property
  def signature(self) -> str:
    """
    Canonical text of the trigger node.

    Returns:
        str: Method name or callee path identifying the idiom.
    """
    return _SIGNATURES[self]

  @property
  def is_path_signature(self) -> bool:
    """
    True if the signature is a `::`-separated callee path.

    Path signatures also match fully qualified spellings
    (e.g. `std::ptr::copy` matches `ptr::copy`).
    """
    return "::" in self.signature

  @property
  def has_companion(self) -> bool:
    """True if the rewrite lands on a statement outside the unsafe region."""
    return self is UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER


_SIGNATURES = {
  UnsafeIdiom.RESERVED_THEN_UNINITIALIZED_BUFFER: "set_len",
  UnsafeIdiom.RAW_RANGE_COPY_WITHIN_ONE_BUFFER: "ptr::copy",
  UnsafeIdiom.RAW_NON_OVERLAPPING_COPY_BETWEEN_BUFFERS: "ptr::copy_nonoverlapping",
  UnsafeIdiom.UNCHECKED_INDEX_READ: "get_unchecked",
  UnsafeIdiom.UNCHECKED_INDEX_WRITE: "get_unchecked_mut",
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_CONSTRUCTION: "CString::from_vec_unchecked",
  UnsafeIdiom.RAW_BYTES_TO_VALIDATED_STRING_LENGTH_CHECK: "CStr::from_bytes_with_nul_unchecked",
}

# Companion signatures. These confirm a match but never trigger one.
RESERVE_CAPACITY_SIGNATURE = "Vec::with_capacity"
RESERVE_METHOD_SIGNATURE = "reserve"


class Rejection(str, Enum):
  """
  Typed "not applicable" reasons.

  Every stage of the pipeline returns either a concrete value or a
  `NotApplicable` outcome carrying one of these reasons.
  """

  # Classification
  REGION_NOT_BLOCK = "region_not_block"
  IDIOM_DISABLED = "idiom_disabled"
  MISSING_RESERVATION = "missing_reservation"
  MISSING_READ = "missing_read"
  NO_ENCLOSING_STATEMENT = "no_enclosing_statement"

  # Extraction
  UNEXPECTED_CALL_SHAPE = "unexpected_call_shape"
  WRONG_ARITY = "wrong_arity"
  NOT_AN_INDEX_EXPRESSION = "not_an_index_expression"
  MISMATCHED_BASES = "mismatched_bases"
  UNSUPPORTED_POSITION = "unsupported_position"

  # Planning
  NOT_A_REGION_STATEMENT = "not_a_region_statement"
  REGION_NOT_STATEMENT = "region_not_statement"
  NO_ANCHOR = "no_anchor"
  NO_LINE_BOUNDARY = "no_line_boundary"


class AssistKind(str, Enum):
  """Categories of registered edit actions."""

  REFACTOR_REWRITE = "refactor.rewrite"
