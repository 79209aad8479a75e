"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

import pytest

from packing_core.models import (
    Calculation,
    Day,
    DayCondition,
    DefaultItemRule,
    Operator,
    Person,
    RuleOverride,
    Trip,
    TripRule,
)

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed timestamp used for created_at/updated_at."""
    return T0


@pytest.fixture
def trip() -> Trip:
    """A three-day lake trip."""
    return Trip(id="trip-1", title="Lake weekend", created_at=T0, updated_at=T0)


@pytest.fixture
def days() -> list[Day]:
    """Three days: a sunny travel day, a rainy day, a mild day."""
    return [
        Day(date=date(2025, 6, 10), location="Home", expected_climate="sunny", travel=True),
        Day(date=date(2025, 6, 11), location="Lake", expected_climate="light rain"),
        Day(date=date(2025, 6, 12), location="Lake", expected_climate="temperate"),
    ]


@pytest.fixture
def make_person() -> Callable[..., Person]:
    """Factory for people on trip-1."""

    def _make(person_id: str, name: str, age: int | None = None, **fields: Any) -> Person:
        return Person(
            id=person_id,
            trip_id=fields.pop("trip_id", "trip-1"),
            name=name,
            age=age,
            created_at=T0,
            updated_at=fields.pop("updated_at", T0),
            **fields,
        )

    return _make


@pytest.fixture
def people(make_person: Callable[..., Person]) -> list[Person]:
    """An adult (35) and a child (10)."""
    return [make_person("p-adult", "Alex", 35), make_person("p-kid", "Sam", 10)]


@pytest.fixture
def make_rule() -> Callable[..., DefaultItemRule]:
    """Factory for rule templates."""

    def _make(
        rule_id: str,
        name: str,
        calculation: Calculation,
        conditions: list | None = None,
        **fields: Any,
    ) -> DefaultItemRule:
        return DefaultItemRule(
            id=rule_id,
            name=name,
            calculation=calculation,
            conditions=conditions or [],
            created_at=T0,
            updated_at=fields.pop("updated_at", T0),
            **fields,
        )

    return _make


@pytest.fixture
def make_trip_rule() -> Callable[..., TripRule]:
    """Factory for rule attachments to trip-1."""

    def _make(rule_id: str, **fields: Any) -> TripRule:
        return TripRule(
            id=fields.pop("id", f"tr-{rule_id}"),
            trip_id=fields.pop("trip_id", "trip-1"),
            rule_id=rule_id,
            created_at=T0,
            updated_at=fields.pop("updated_at", T0),
            **fields,
        )

    return _make


@pytest.fixture
def make_override() -> Callable[..., RuleOverride]:
    """Factory for overrides on trip-1."""

    def _make(override_id: str, rule_id: str, **fields: Any) -> RuleOverride:
        return RuleOverride(
            id=override_id,
            rule_id=rule_id,
            trip_id=fields.pop("trip_id", "trip-1"),
            created_at=T0,
            updated_at=fields.pop("updated_at", T0),
            **fields,
        )

    return _make


@pytest.fixture
def rain_jacket_rule(make_rule: Callable[..., DefaultItemRule]) -> DefaultItemRule:
    """One rain jacket per person per rainy day."""
    return make_rule(
        "rule-rain-jacket",
        "Rain jacket",
        Calculation(base_quantity=1, per_person=True, per_day=True),
        [DayCondition(field="expected_climate", operator=Operator.contains, value="rain")],
    )
