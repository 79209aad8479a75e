"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class SyncedEntity(BaseModel):
    """Fields every synchronized entity carries for replica merge.

    `version` increases with every mutation of the same id. A deleted entity
    stays in the collection as a tombstone (`is_deleted=True`) until every
    replica has observed it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: AwareDatetime
    updated_at: AwareDatetime
    version: int = Field(default=0, ge=0)
    is_deleted: bool = False


class Operator(str, Enum):
    """Comparison operator used by rule conditions."""

    eq = "=="
    ne = "!="
    lt = "<"
    gt = ">"
    le = "<="
    ge = ">="
    in_ = "in"
    contains = "contains"


class Gender(str, Enum):
    """Gender values a person condition can compare against."""

    male = "male"
    female = "female"
    other = "other"
    prefer_not_to_say = "prefer-not-to-say"
