"""Recovery from field-level authorization failures."""

from __future__ import annotations

from authz_simulator.recovery._extract import (
    extract_forbidden_fields,
    forbidden_fields_from_error,
    reason_of,
)
from authz_simulator.recovery._strip import StripResult, strip_forbidden_fields

__all__ = [
    "StripResult",
    "extract_forbidden_fields",
    "forbidden_fields_from_error",
    "reason_of",
    "strip_forbidden_fields",
]
