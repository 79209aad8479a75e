"""Condition evaluation for packing rules.

Conditions are pure predicates: the same condition against the same entity
state always yields the same answer, so the engine evaluates each condition
once per person (or per day) and reuses the result across the grid.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any

from packing_core.models.common import Operator
from packing_core.models.rules import Condition, DayCondition, PersonCondition
from packing_core.models.trip import Day, Person


class ConditionTypeMismatch(Exception):
    """Condition applied to the wrong kind of entity, or to no entity."""

    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _same(value: Any, expected: Any) -> bool:
    """Strict equality: a bool never equals a number."""
    if isinstance(value, bool) != isinstance(expected, bool):
        return False
    return value == expected


def compare(value: Any, operator: Operator, expected: Any) -> bool:
    """Compare an entity field value against a condition value.

    Ordering operators only match numeric operands; any other combination is
    a non-match rather than an error.
    """
    value = _plain(value)

    if operator == Operator.eq:
        return _same(value, expected)
    if operator == Operator.ne:
        return not _same(value, expected)

    if operator in (Operator.lt, Operator.gt, Operator.le, Operator.ge):
        if not (_is_number(value) and _is_number(expected)):
            return False
        if operator == Operator.lt:
            return value < expected
        if operator == Operator.gt:
            return value > expected
        if operator == Operator.le:
            return value <= expected
        return value >= expected

    if operator == Operator.in_:
        if isinstance(expected, list):
            return any(_same(value, item) for item in expected)
        if isinstance(value, list):
            return any(_same(item, expected) for item in value)
        return False

    if operator == Operator.contains:
        if isinstance(value, str) and isinstance(expected, str):
            return expected.lower() in value.lower()
        if isinstance(value, list):
            return any(_same(item, expected) for item in value)
        return False

    return False


def matches(condition: Condition, person: Person | None = None, day: Day | None = None) -> bool:
    """Decide whether a single condition holds for a person/day pair.

    Raises:
        ConditionTypeMismatch: the condition needs an entity that is missing
            or of the wrong kind, or the condition itself is not a known kind.
    """
    if isinstance(condition, PersonCondition):
        if not isinstance(person, Person):
            raise ConditionTypeMismatch(
                f"person condition on '{condition.field}' needs a Person, got {type(person).__name__}"
            )
        value = getattr(person, condition.field)
    elif isinstance(condition, DayCondition):
        if not isinstance(day, Day):
            raise ConditionTypeMismatch(
                f"day condition on '{condition.field}' needs a Day, got {type(day).__name__}"
            )
        value = getattr(day, condition.field)
    else:
        raise ConditionTypeMismatch(f"Unsupported condition: {type(condition).__name__}")

    # A field the entity does not carry never matches
    if value is None:
        return False
    return compare(value, condition.operator, condition.value)


def matches_all(
    conditions: Sequence[Condition] | None,
    person: Person | None = None,
    day: Day | None = None,
) -> bool:
    """AND of all conditions; an absent or empty list matches everything."""
    if not conditions:
        return True
    return all(matches(condition, person, day) for condition in conditions)
