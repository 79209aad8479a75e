"""Packing list models - engine inputs snapshot and materialized output."""

from pydantic import BaseModel, ConfigDict, Field

from packing_core.models.diagnostics import Diagnostic
from packing_core.models.rules import DefaultItemRule, RuleOverride, TripRule
from packing_core.models.trip import Day, Person, Trip


class TripSnapshot(BaseModel):
    """Canonical entity set for one trip, passed explicitly to every call."""

    model_config = ConfigDict(frozen=True)

    trip: Trip
    days: list[Day] = Field(default_factory=list)
    people: list[Person] = Field(default_factory=list)
    trip_rules: list[TripRule] = Field(default_factory=list)
    rules: list[DefaultItemRule] = Field(default_factory=list)
    overrides: list[RuleOverride] = Field(default_factory=list)


class PackingListEntry(BaseModel):
    """One line of the materialized packing list.

    `day_index` is the first day of the entry's day group; `day_end` is set
    when the entry covers several days. Trip-wide entries carry neither a
    person nor a day.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_hash: str
    person_id: str | None = None
    day_index: int | None = None
    day_end: int | None = None
    item_name: str
    quantity: int = Field(..., gt=0)
    is_extra: bool = False
    is_overridden: bool = False
    is_packed: bool = False

    @property
    def key(self) -> tuple[str, str, str | None, int | None, bool]:
        """Identity of the entry across recomputations of unchanged rules."""
        return (self.rule_id, self.rule_hash, self.person_id, self.day_index, self.is_extra)


class PackingListResult(BaseModel):
    """Engine output: ordered entries plus diagnostics."""

    entries: list[PackingListEntry] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
