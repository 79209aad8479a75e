"""Last-writer-wins merge of synchronized entities with tombstones.

Per id: the higher version wins; on equal versions a tombstone beats a live
copy, then the later `updated_at` wins. Equal version and timestamp with
different content is indeterminate: it is reported and broken by comparing
content digests so that merge stays commutative.
"""

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from packing_core.config import get_settings
from packing_core.models.common import SyncedEntity
from packing_core.models.diagnostics import Diagnostic, DiagnosticKind
from packing_core.models.packing import TripSnapshot
from packing_core.utils.logging import StructuredPackingLogger
from packing_core.utils.metrics import PrometheusPackingMetrics

T = TypeVar("T", bound=SyncedEntity)

_logger = StructuredPackingLogger()
_metrics = PrometheusPackingMetrics()


@dataclass(frozen=True)
class MergeResult(Generic[T]):
    """Merged canonical entity plus an optional indeterminate-merge report."""

    entity: T
    conflict: Diagnostic | None = None
    decided_by: str = "version"


def content_digest(entity: SyncedEntity) -> str:
    """Digest of the full persisted field set."""
    sorted_json = json.dumps(entity.model_dump(mode="json"), sort_keys=True)
    return hashlib.sha256(sorted_json.encode()).hexdigest()


def _decide(local: T, remote: T) -> MergeResult[T]:
    if remote.version != local.version:
        winner = remote if remote.version > local.version else local
        return MergeResult(winner, decided_by="version")

    if local.is_deleted != remote.is_deleted:
        winner = local if local.is_deleted else remote
        return MergeResult(winner, decided_by="tombstone")

    if local.updated_at != remote.updated_at:
        winner = remote if remote.updated_at > local.updated_at else local
        return MergeResult(winner, decided_by="updated_at")

    local_digest, remote_digest = content_digest(local), content_digest(remote)
    if local_digest == remote_digest:
        return MergeResult(local, decided_by="identical")

    winner = local if local_digest > remote_digest else remote
    conflict = Diagnostic(
        kind=DiagnosticKind.MERGE_INDETERMINATE,
        code="MERGE_INDETERMINATE",
        message="Two replicas edited the same entity at the same version and timestamp; kept the copy with the greater content digest.",
        entity_ids=[local.id],
        details={
            "entity_type": type(local).__name__,
            "version": local.version,
            "updated_at": local.updated_at.isoformat(),
            "winner_digest": max(local_digest, remote_digest),
        },
    )
    return MergeResult(winner, conflict=conflict, decided_by="digest")


def merge_entities(local: T, remote: T) -> MergeResult[T]:
    """Merge two replicas of the same entity.

    Neither input is mutated; the result holds a fresh copy whose version is
    max(local.version, remote.version).

    Raises:
        ValueError: ids or entity types differ
    """
    if local.id != remote.id:
        raise ValueError(f"Cannot merge different entities: {local.id} != {remote.id}")
    if type(local) is not type(remote):
        raise ValueError(
            f"Cannot merge {type(local).__name__} with {type(remote).__name__} for id {local.id}"
        )

    decided = _decide(local, remote)
    entity_type = type(local).__name__
    _metrics.inc_merge(entity_type, decided.decided_by)
    if decided.conflict is not None:
        _metrics.inc_diagnostic(decided.conflict.kind.value)
        if get_settings().log_merge_conflicts:
            _logger.log_diagnostic(decided.conflict, entity_type=entity_type)

    return MergeResult(decided.entity.model_copy(), decided.conflict, decided.decided_by)


def merge(local: T, remote: T) -> T:
    """Merge two replicas and return only the canonical entity."""
    return merge_entities(local, remote).entity


@dataclass
class CollectionMerge(Generic[T]):
    """Merged collection plus the conflicts met along the way."""

    entities: list[T] = field(default_factory=list)
    conflicts: list[Diagnostic] = field(default_factory=list)


def merge_collections(local: Iterable[T], remote: Iterable[T]) -> CollectionMerge[T]:
    """Merge two replica collections id by id.

    Ids present on one side only are kept as-is. Copies sharing an id are
    folded one after another, never in parallel. Output is ordered by id.
    """
    merged: dict[str, T] = {}
    result: CollectionMerge[T] = CollectionMerge()

    for entity in [*local, *remote]:
        current = merged.get(entity.id)
        if current is None:
            merged[entity.id] = entity
            continue
        outcome = merge_entities(current, entity)
        merged[entity.id] = outcome.entity
        if outcome.conflict is not None:
            result.conflicts.append(outcome.conflict)

    result.entities = [merged[entity_id] for entity_id in sorted(merged)]
    return result


def merge_snapshots(local: TripSnapshot, remote: TripSnapshot) -> tuple[TripSnapshot, list[Diagnostic]]:
    """Merge every synchronized collection of two replicas of one trip.

    Days have no sync identity of their own and travel with the trip record:
    the replica whose trip was updated last supplies both.

    Raises:
        ValueError: the snapshots belong to different trips
    """
    if local.trip.id != remote.trip.id:
        raise ValueError(f"Cannot merge snapshots of different trips: {local.trip.id} != {remote.trip.id}")

    if local.trip.updated_at != remote.trip.updated_at:
        source = remote if remote.trip.updated_at > local.trip.updated_at else local
    else:
        source = local

    people = merge_collections(local.people, remote.people)
    trip_rules = merge_collections(local.trip_rules, remote.trip_rules)
    rules = merge_collections(local.rules, remote.rules)
    overrides = merge_collections(local.overrides, remote.overrides)

    snapshot = TripSnapshot(
        trip=source.trip,
        days=source.days,
        people=people.entities,
        trip_rules=trip_rules.entities,
        rules=rules.entities,
        overrides=overrides.entities,
    )
    conflicts = people.conflicts + trip_rules.conflicts + rules.conflicts + overrides.conflicts
    return snapshot, conflicts
