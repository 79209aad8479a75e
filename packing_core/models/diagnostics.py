"""Diagnostic models - non-fatal conditions reported next to a result."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for diagnostic details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class DiagnosticSeverity(str, Enum):
    """Severity levels for diagnostics."""

    ADVISORY = "advisory"
    BLOCKING = "blocking"


class DiagnosticKind(str, Enum):
    """Categories of degraded evaluation or merge."""

    CONDITION_TYPE_MISMATCH = "condition_type_mismatch"
    CALCULATION_ERROR = "calculation_error"
    MERGE_INDETERMINATE = "merge_indeterminate"
    OVERRIDE_SCOPE_CONFLICT = "override_scope_conflict"


class Diagnostic(BaseModel):
    """A condition the core resolved deterministically but wants surfaced.

    Diagnostics never abort a computation; they explain why a contribution
    was omitted or how a tie was broken.
    """

    kind: DiagnosticKind
    code: str  # Machine-usable short code, e.g., "MISSING_FIELD"
    message: str  # Human-readable description (1-2 sentences)
    severity: DiagnosticSeverity = DiagnosticSeverity.ADVISORY
    entity_ids: list[str]  # Rule, override, person or entity ids involved
    details: dict[str, JsonValue] = Field(default_factory=dict)
