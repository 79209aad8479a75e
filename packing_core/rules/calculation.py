"""Quantity calculation over a rule's matched (person, day) set."""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, NamedTuple

from packing_core.models.rules import Calculation, DaysPattern, FieldRef
from packing_core.models.trip import Day, Person


class CalculationError(Exception):
    """Formula references a field no matched entity carries."""

    pass


class MatchedPair(NamedTuple):
    """A (person, day) pair a rule's conditions accepted."""

    person: Person
    day_index: int
    day: Day


@dataclass(frozen=True)
class Contribution:
    """Quantity produced for one scope of the grid.

    `person_id` is None for scopes that span all matched people; `day_indices`
    is empty for scopes that span all matched days.
    """

    person_id: str | None
    day_indices: tuple[int, ...]
    quantity: int
    is_extra: bool = False

    @property
    def day_index(self) -> int | None:
        return self.day_indices[0] if self.day_indices else None

    @property
    def day_end(self) -> int | None:
        return self.day_indices[-1] if len(self.day_indices) > 1 else None


def day_groups(day_indices: Sequence[int], pattern: DaysPattern | None) -> list[tuple[int, ...]]:
    """Split sorted day indices into chunks of `pattern.every` days.

    Without a pattern every day is its own group. With `round_up=False` a
    trailing partial chunk is dropped.
    """
    if pattern is None or pattern.every == 1:
        return [(index,) for index in day_indices]

    groups: list[tuple[int, ...]] = []
    for start in range(0, len(day_indices), pattern.every):
        group = tuple(day_indices[start : start + pattern.every])
        if len(group) < pattern.every and not pattern.round_up:
            break
        groups.append(group)
    return groups


def _people_in(pairs: Sequence[MatchedPair]) -> list[str]:
    return sorted({pair.person.id for pair in pairs})


def _days_in(pairs: Sequence[MatchedPair]) -> list[int]:
    return sorted({pair.day_index for pair in pairs})


def _scopes(
    pairs: Sequence[MatchedPair],
    per_person: bool,
    per_day: bool,
    pattern: DaysPattern | None,
) -> list[tuple[str | None, tuple[int, ...], list[MatchedPair]]]:
    """Group matched pairs at the granularity the flags ask for."""
    if per_person and per_day:
        scopes = []
        for person_id in _people_in(pairs):
            own = [pair for pair in pairs if pair.person.id == person_id]
            for group in day_groups(_days_in(own), pattern):
                covered = [pair for pair in own if pair.day_index in group]
                scopes.append((person_id, group, covered))
        return scopes

    if per_person:
        return [
            (person_id, (), [pair for pair in pairs if pair.person.id == person_id])
            for person_id in _people_in(pairs)
        ]

    if per_day:
        return [
            (None, group, [pair for pair in pairs if pair.day_index in group])
            for group in day_groups(_days_in(pairs), pattern)
        ]

    return [(None, (), list(pairs))]


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _field_value(ref: FieldRef, pair: MatchedPair) -> float | None:
    if ref.type == "person":
        if ref.field.startswith("settings."):
            return _numeric(pair.person.settings.get(ref.field.removeprefix("settings.")))
        return _numeric(getattr(pair.person, ref.field, None))
    return _numeric(getattr(pair.day, ref.field, None))


def _field_total(ref: FieldRef, pairs: Sequence[MatchedPair]) -> float:
    """Sum the field over the distinct entities the pairs cover."""
    seen: dict[str | int, float] = {}
    for pair in pairs:
        key = pair.person.id if ref.type == "person" else pair.day_index
        if key not in seen:
            seen[key] = _field_value(ref, pair) or 0.0
    return sum(seen.values())


def _check_field_present(ref: FieldRef, pairs: Sequence[MatchedPair]) -> None:
    if not any(_field_value(ref, pair) is not None for pair in pairs):
        raise CalculationError(
            f"multiplier field {ref.type}.{ref.field} is absent on all matched entities"
        )


def contributions(
    calculation: Calculation,
    pairs: Sequence[MatchedPair],
    *,
    extra: bool = False,
) -> list[Contribution]:
    """Compute per-scope quantities for the base (or extra) part of a formula.

    Args:
        calculation: Rule formula
        pairs: Matched (person, day) pairs
        extra: Evaluate `calculation.extra_items` instead of the base quantity

    Returns:
        Contributions with quantity > 0, in person/day order

    Raises:
        CalculationError: `multiply_by` names a field no matched entity has
    """
    if not pairs:
        return []

    if extra:
        if calculation.extra_items is None:
            return []
        part = calculation.extra_items
        base, ref = part.quantity, None
    else:
        part = calculation
        base, ref = calculation.base_quantity, calculation.multiply_by
        if ref is not None:
            _check_field_present(ref, pairs)

    result: list[Contribution] = []
    for person_id, group, covered in _scopes(pairs, part.per_person, part.per_day, part.days_pattern):
        quantity: float = base
        if not part.per_person and not part.per_day and part.days_pattern is not None:
            quantity *= len(day_groups(_days_in(covered), part.days_pattern))
        if ref is not None:
            quantity *= _field_total(ref, covered)
        quantity = math.ceil(quantity)
        if quantity > 0:
            result.append(Contribution(person_id, group, int(quantity), is_extra=extra))
    return result


def calculate(calculation: Calculation, pairs: Sequence[MatchedPair]) -> int:
    """Total quantity the formula requires for the matched set.

    Deterministic, non-negative, and non-decreasing as matches are added.
    """
    base = contributions(calculation, pairs)
    extra = contributions(calculation, pairs, extra=True)
    return sum(c.quantity for c in base) + sum(c.quantity for c in extra)
