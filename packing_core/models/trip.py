"""Trip models - days, timeline events and the derived summary."""

from datetime import date, datetime
from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from packing_core.models.common import Gender, SyncedEntity


class TripEventType(str, Enum):
    """Timeline marker kinds."""

    leave_home = "leave_home"
    arrive_destination = "arrive_destination"
    leave_destination = "leave_destination"
    arrive_home = "arrive_home"


class TripEvent(BaseModel):
    """Ordered timeline marker (departures and arrivals)."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: TripEventType
    date: date
    location: str | None = None
    notes: str | None = None


class Item(BaseModel):
    """Manually planned item attached to a day."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: int = Field(default=1, ge=0)


class Day(BaseModel):
    """A single calendar day of a trip.

    Days are addressed by their position in the trip's day list (`day_index`);
    `date` identifies the day uniquely within the trip.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    location: str
    expected_climate: str
    travel: bool = False
    items: list[Item] = Field(default_factory=list)
    is_deleted: bool = False


class Trip(BaseModel):
    """Root aggregate for one trip."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str | None = None
    created_at: AwareDatetime
    updated_at: AwareDatetime
    events: list[TripEvent] = Field(default_factory=list)


class Person(SyncedEntity):
    """A traveller on a trip.

    Age and gender are optional because some trips omit demographic detail;
    conditions on a missing field never match.
    """

    trip_id: str
    name: str
    age: int | None = Field(default=None, ge=0, le=150)
    gender: Gender | None = None
    settings: dict[str, float | int | str | bool] = Field(default_factory=dict)


class TripSummary(BaseModel):
    """Read-only aggregate recomputed from the materialized packing list."""

    trip_id: str
    title: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    total_items: int = Field(..., ge=0)
    packed_items: int = Field(..., ge=0)
    total_people: int = Field(..., ge=0)

    @field_validator("packed_items")
    @classmethod
    def validate_packed_within_total(cls, v: int, info: ValidationInfo) -> int:
        """Ensure packed_items <= total_items."""
        if "total_items" in info.data and v > info.data["total_items"]:
            raise ValueError("packed_items must be <= total_items")
        return v
