"""Rule models - conditions, calculations, rule templates and overrides."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packing_core.models.common import Operator, SyncedEntity

ConditionValue = str | int | float | bool | list[str | int | float]


class PersonCondition(BaseModel):
    """Condition evaluated against a single person."""

    model_config = ConfigDict(frozen=True)

    type: Literal["person"] = "person"
    field: Literal["age", "gender", "name"]
    operator: Operator
    value: ConditionValue
    notes: str | None = None


class DayCondition(BaseModel):
    """Condition evaluated against a single day."""

    model_config = ConfigDict(frozen=True)

    type: Literal["day"] = "day"
    field: Literal["location", "expected_climate", "travel"]
    operator: Operator
    value: ConditionValue
    notes: str | None = None


Condition = Annotated[PersonCondition | DayCondition, Field(discriminator="type")]


class DaysPattern(BaseModel):
    """Group matching days into chunks, e.g. one towel every 3 days."""

    model_config = ConfigDict(frozen=True)

    every: int = Field(..., ge=1)
    round_up: bool = True


class ExtraItems(BaseModel):
    """Additional quantity emitted as separate "extra" entries."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(..., ge=0)
    per_person: bool = False
    per_day: bool = False
    days_pattern: DaysPattern | None = None


class FieldRef(BaseModel):
    """Numeric field of a person or day used as a multiplier.

    Person fields may address a settings key as "settings.<key>".
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["person", "day"]
    field: str


class Calculation(BaseModel):
    """Declarative quantity formula over a rule's matched set."""

    model_config = ConfigDict(frozen=True)

    base_quantity: int = Field(..., ge=0)
    per_person: bool = False
    per_day: bool = False
    days_pattern: DaysPattern | None = None
    extra_items: ExtraItems | None = None
    multiply_by: FieldRef | None = None


class DefaultItemRule(SyncedEntity):
    """Trip-independent packing rule template.

    Conditions are ANDed together; an absent or empty list matches every
    (person, day) pair.
    """

    name: str
    calculation: Calculation
    conditions: list[Condition] = Field(default_factory=list)
    notes: str | None = None


class TripRule(SyncedEntity):
    """Join entity attaching a rule template to a trip."""

    trip_id: str
    rule_id: str


class ScopeKind(str, Enum):
    """Override scope, ordered from least to most specific."""

    trip = "trip"
    day = "day"
    person = "person"
    person_day = "person_day"


SPECIFICITY: dict[ScopeKind, int] = {
    ScopeKind.trip: 0,
    ScopeKind.day: 1,
    ScopeKind.person: 2,
    ScopeKind.person_day: 3,
}


class OverrideScope(BaseModel):
    """Closed scope variant of a rule override."""

    model_config = ConfigDict(frozen=True)

    kind: ScopeKind
    person_id: str | None = None
    day_index: int | None = None

    @model_validator(mode="after")
    def validate_fields_match_kind(self) -> "OverrideScope":
        """Ensure exactly the fields the kind requires are set."""
        needs_person = self.kind in (ScopeKind.person, ScopeKind.person_day)
        needs_day = self.kind in (ScopeKind.day, ScopeKind.person_day)
        if needs_person != (self.person_id is not None):
            raise ValueError(f"scope {self.kind.value} person_id mismatch")
        if needs_day != (self.day_index is not None):
            raise ValueError(f"scope {self.kind.value} day_index mismatch")
        return self

    @property
    def specificity(self) -> int:
        return SPECIFICITY[self.kind]

    @classmethod
    def of(cls, person_id: str | None = None, day_index: int | None = None) -> "OverrideScope":
        """Build the scope implied by the optional narrowing fields."""
        if person_id is not None and day_index is not None:
            kind = ScopeKind.person_day
        elif person_id is not None:
            kind = ScopeKind.person
        elif day_index is not None:
            kind = ScopeKind.day
        else:
            kind = ScopeKind.trip
        return cls(kind=kind, person_id=person_id, day_index=day_index)


class RuleOverride(SyncedEntity):
    """Per-trip adjustment of a rule, optionally narrowed to a person and/or day."""

    rule_id: str
    trip_id: str
    person_id: str | None = None
    day_index: int | None = Field(default=None, ge=0)
    override_count: int | None = Field(default=None, ge=0)
    is_excluded: bool = False
    last_modified_by: str | None = None

    @property
    def scope(self) -> OverrideScope:
        return OverrideScope.of(self.person_id, self.day_index)
