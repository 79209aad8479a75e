"""Models package - re-exports for convenience."""

from packing_core.models.common import Gender, Operator, SyncedEntity
from packing_core.models.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSeverity
from packing_core.models.packing import PackingListEntry, PackingListResult, TripSnapshot
from packing_core.models.rules import (
    Calculation,
    Condition,
    DayCondition,
    DaysPattern,
    DefaultItemRule,
    ExtraItems,
    FieldRef,
    OverrideScope,
    PersonCondition,
    RuleOverride,
    ScopeKind,
    TripRule,
)
from packing_core.models.trip import (
    Day,
    Item,
    Person,
    Trip,
    TripEvent,
    TripEventType,
    TripSummary,
)

__all__ = [
    # Common
    "SyncedEntity",
    "Operator",
    "Gender",
    # Trip
    "Trip",
    "Day",
    "Item",
    "Person",
    "TripEvent",
    "TripEventType",
    "TripSummary",
    # Rules
    "PersonCondition",
    "DayCondition",
    "Condition",
    "DaysPattern",
    "ExtraItems",
    "FieldRef",
    "Calculation",
    "DefaultItemRule",
    "TripRule",
    "RuleOverride",
    "OverrideScope",
    "ScopeKind",
    # Packing list
    "TripSnapshot",
    "PackingListEntry",
    "PackingListResult",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSeverity",
]
