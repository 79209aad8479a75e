"""Local edits and tombstone housekeeping for synchronized entities."""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar

from packing_core.models.common import SyncedEntity

T = TypeVar("T", bound=SyncedEntity)

# Fields a domain edit may not set directly
_SYNC_FIELDS = {"id", "created_at", "updated_at", "version", "is_deleted"}


def touch(entity: T, now: datetime | None = None, **changes: Any) -> T:
    """Return an edited copy with the version bumped from the entity's own.

    Always edit the canonical (post-merge) value so the new version is
    strictly greater than anything the replicas have seen for this id.

    Raises:
        ValueError: a sync field or a field the model lacks is passed as a change
    """
    forbidden = _SYNC_FIELDS & changes.keys()
    if forbidden:
        raise ValueError(f"Sync fields cannot be edited directly: {sorted(forbidden)}")
    unknown = changes.keys() - type(entity).model_fields.keys()
    if unknown:
        raise ValueError(f"Unknown fields for {type(entity).__name__}: {sorted(unknown)}")

    update = {
        **changes,
        "version": entity.version + 1,
        "updated_at": now or datetime.now(timezone.utc),
    }
    # model_copy skips validation; round-trip through the model to keep constraints
    return type(entity).model_validate({**entity.model_dump(), **update})


def tombstone(entity: T, now: datetime | None = None) -> T:
    """Soft-delete: bump the version and mark the entity deleted."""
    return type(entity).model_validate(
        {
            **entity.model_dump(),
            "version": entity.version + 1,
            "updated_at": now or datetime.now(timezone.utc),
            "is_deleted": True,
        }
    )


def active(entities: Iterable[T]) -> list[T]:
    """Drop tombstones."""
    return [entity for entity in entities if not entity.is_deleted]


def prune_tombstones(
    entities: Iterable[T],
    observed_versions: Sequence[Mapping[str, int]],
) -> list[T]:
    """Physically drop tombstones every replica has already observed.

    Args:
        entities: Canonical collection
        observed_versions: One mapping per replica of id -> highest version
            that replica has seen

    Returns:
        The collection without tombstones known everywhere; with no replica
        information nothing is dropped
    """
    entities = list(entities)
    if not observed_versions:
        return entities

    def observed_everywhere(entity: T) -> bool:
        return all(seen.get(entity.id, -1) >= entity.version for seen in observed_versions)

    return [entity for entity in entities if not (entity.is_deleted and observed_everywhere(entity))]
