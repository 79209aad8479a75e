"""Unit tests for override resolution."""

from collections.abc import Callable

import pytest
from pydantic import ValidationError

from packing_core.models import DiagnosticKind, OverrideScope, RuleOverride, ScopeKind
from packing_core.rules.overrides import resolve, scope_conflicts

MakeOverride = Callable[..., RuleOverride]


def scope(**kwargs: object) -> dict:
    """Helper for the resolve() scope keywords."""
    return {"trip_id": "trip-1", "rule_id": "rule-1", **kwargs}


def test_no_override_passes_base_through() -> None:
    """Test that the base quantity is unchanged without overrides."""
    result = resolve(4, [], **scope(person_id="p-1", day_index=0))

    assert result.quantity == 4
    assert not result.excluded
    assert result.override is None


def test_override_count_replaces_base(make_override: MakeOverride) -> None:
    """Test that override_count replaces, not adds to, the base quantity."""
    overrides = [make_override("o-1", "rule-1", override_count=7)]

    result = resolve(4, overrides, **scope())

    assert result.quantity == 7
    assert result.replaces_quantity


def test_exclusion_dominates_count(make_override: MakeOverride) -> None:
    """Test that an excluding override zeroes the quantity regardless of count."""
    overrides = [make_override("o-1", "rule-1", override_count=9, is_excluded=True)]

    for base in (1, 5, 100):
        result = resolve(base, overrides, **scope(person_id="p-1", day_index=2))
        assert result.quantity == 0
        assert result.excluded


def test_specificity_ordering(make_override: MakeOverride) -> None:
    """Test that the exact (person, day) override beats person-only and trip-wide ones."""
    overrides = [
        make_override("o-trip", "rule-1", override_count=1, version=9),
        make_override("o-day", "rule-1", day_index=0, override_count=2),
        make_override("o-person", "rule-1", person_id="p-1", override_count=3),
        make_override("o-exact", "rule-1", person_id="p-1", day_index=0, override_count=4),
    ]

    assert resolve(0, overrides, **scope(person_id="p-1", day_index=0)).quantity == 4
    assert resolve(0, overrides, **scope(person_id="p-1", day_index=1)).quantity == 3
    assert resolve(0, overrides, **scope(person_id="p-2", day_index=0)).quantity == 2
    assert resolve(0, overrides, **scope(person_id="p-2", day_index=1)).quantity == 1


def test_more_specific_non_excluding_override_reincludes(make_override: MakeOverride) -> None:
    """Test that a person override without a count masks a trip-wide exclusion."""
    overrides = [
        make_override("o-trip", "rule-1", is_excluded=True),
        make_override("o-person", "rule-1", person_id="p-1"),
    ]

    assert resolve(3, overrides, **scope(person_id="p-1")).quantity == 3
    assert resolve(3, overrides, **scope(person_id="p-2")).excluded


def test_deleted_and_foreign_overrides_are_ignored(make_override: MakeOverride) -> None:
    """Test that tombstones and overrides for other rules or trips never apply."""
    overrides = [
        make_override("o-deleted", "rule-1", is_excluded=True, is_deleted=True, version=2),
        make_override("o-other-rule", "rule-2", is_excluded=True),
        make_override("o-other-trip", "rule-1", is_excluded=True, trip_id="trip-2"),
    ]

    result = resolve(5, overrides, **scope())

    assert result.quantity == 5
    assert result.override is None


def test_tie_prefers_higher_version_then_greater_id(make_override: MakeOverride) -> None:
    """Test deterministic tie-breaks at equal specificity."""
    by_version = [
        make_override("o-b", "rule-1", person_id="p-1", override_count=1, version=3),
        make_override("o-a", "rule-1", person_id="p-1", override_count=2, version=1),
    ]
    by_id = [
        make_override("o-a", "rule-1", person_id="p-1", override_count=1, version=1),
        make_override("o-b", "rule-1", person_id="p-1", override_count=2, version=1),
    ]

    assert resolve(0, by_version, **scope(person_id="p-1")).override.id == "o-b"
    assert resolve(0, list(reversed(by_id)), **scope(person_id="p-1")).override.id == "o-b"


def test_scope_conflicts_reports_each_duplicate_key_once(make_override: MakeOverride) -> None:
    """Test that duplicate active overrides are reported once per key."""
    overrides = [
        make_override("o-1", "rule-1", person_id="p-1", version=1),
        make_override("o-2", "rule-1", person_id="p-1", version=4),
        make_override("o-3", "rule-1", person_id="p-1", is_deleted=True, version=9),
        make_override("o-4", "rule-1", person_id="p-2"),
    ]

    diagnostics = scope_conflicts(overrides)

    assert len(diagnostics) == 1
    assert diagnostics[0].kind == DiagnosticKind.OVERRIDE_SCOPE_CONFLICT
    assert diagnostics[0].entity_ids == ["o-1", "o-2"]
    assert diagnostics[0].details["winner_id"] == "o-2"


def test_override_scope_variant(make_override: MakeOverride) -> None:
    """Test that narrowing fields map to the closed scope variant."""
    assert make_override("o", "r").scope.kind == ScopeKind.trip
    assert make_override("o", "r", person_id="p").scope.kind == ScopeKind.person
    assert make_override("o", "r", day_index=1).scope.kind == ScopeKind.day
    assert make_override("o", "r", person_id="p", day_index=1).scope.kind == ScopeKind.person_day


def test_scope_variant_rejects_inconsistent_fields() -> None:
    """Test that a scope kind must carry exactly its own fields."""
    with pytest.raises(ValidationError, match="person_id mismatch"):
        OverrideScope(kind=ScopeKind.person)
    with pytest.raises(ValidationError, match="day_index mismatch"):
        OverrideScope(kind=ScopeKind.trip, day_index=0)
