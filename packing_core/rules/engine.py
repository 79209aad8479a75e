"""Rule engine: materialize a trip's packing list from its rules.

The computation is a pure function of the snapshot it is given. It never
fails as a whole: a condition that cannot be evaluated or a formula that
cannot be computed drops that contribution and adds a diagnostic.
"""

import time
from collections.abc import Sequence

from packing_core.models.diagnostics import Diagnostic, DiagnosticKind
from packing_core.models.packing import PackingListEntry, PackingListResult, TripSnapshot
from packing_core.models.rules import DayCondition, DefaultItemRule, RuleOverride, TripRule
from packing_core.models.trip import Day, Person, Trip
from packing_core.rules.calculation import CalculationError, MatchedPair, contributions
from packing_core.rules.conditions import ConditionTypeMismatch, matches
from packing_core.rules.hashing import rule_hash
from packing_core.rules.overrides import resolve, scope_conflicts
from packing_core.utils.logging import StructuredPackingLogger
from packing_core.utils.metrics import PrometheusPackingMetrics

_logger = StructuredPackingLogger()
_metrics = PrometheusPackingMetrics()


def _attached_rules(
    trip: Trip,
    trip_rules: Sequence[TripRule],
    rules: Sequence[DefaultItemRule],
) -> list[DefaultItemRule]:
    """Active rules linked to the trip by an active TripRule, ordered by id."""
    by_id = {rule.id: rule for rule in rules if not rule.is_deleted}
    attached = {
        link.rule_id
        for link in trip_rules
        if not link.is_deleted and link.trip_id == trip.id
    }
    return [by_id[rule_id] for rule_id in sorted(attached) if rule_id in by_id]


def _condition_mismatch(rule: DefaultItemRule, position: int, error: Exception, entity: str) -> Diagnostic:
    return Diagnostic(
        kind=DiagnosticKind.CONDITION_TYPE_MISMATCH,
        code="CONDITION_TYPE_MISMATCH",
        message="A rule condition could not be evaluated and was treated as not matching.",
        entity_ids=[rule.id, entity],
        details={"condition_index": position, "error": str(error)},
    )


def _matched_pairs(
    rule: DefaultItemRule,
    people: Sequence[Person],
    days: Sequence[tuple[int, Day]],
    diagnostics: list[Diagnostic],
) -> list[MatchedPair]:
    """Evaluate the rule's conditions over the person x day grid.

    Person conditions are evaluated once per person and day conditions once
    per day; a pair matches when both halves hold.
    """
    person_conditions = [(i, c) for i, c in enumerate(rule.conditions) if not isinstance(c, DayCondition)]
    day_conditions = [(i, c) for i, c in enumerate(rule.conditions) if isinstance(c, DayCondition)]

    def person_ok(person: Person) -> bool:
        for position, condition in person_conditions:
            try:
                if not matches(condition, person=person):
                    return False
            except ConditionTypeMismatch as e:
                diagnostics.append(_condition_mismatch(rule, position, e, person.id))
                return False
        return True

    def day_ok(index: int, day: Day) -> bool:
        for position, condition in day_conditions:
            try:
                if not matches(condition, day=day):
                    return False
            except ConditionTypeMismatch as e:
                diagnostics.append(_condition_mismatch(rule, position, e, f"day:{index}"))
                return False
        return True

    matching_people = [person for person in people if person_ok(person)]
    matching_days = [(index, day) for index, day in days if day_ok(index, day)]

    return [
        MatchedPair(person, index, day)
        for index, day in matching_days
        for person in matching_people
    ]


def _entries_for_rule(
    trip: Trip,
    rule: DefaultItemRule,
    pairs: Sequence[MatchedPair],
    overrides: Sequence[RuleOverride],
    diagnostics: list[Diagnostic],
) -> list[PackingListEntry]:
    try:
        produced = contributions(rule.calculation, pairs)
    except CalculationError as e:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.CALCULATION_ERROR,
                code="MISSING_FIELD",
                message="Rule formula references a field no matched entity has; its quantity was treated as 0.",
                entity_ids=[rule.id],
                details={"error": str(e)},
            )
        )
        produced = []
    produced += contributions(rule.calculation, pairs, extra=True)
    if not produced:
        return []

    digest = rule_hash(rule)

    entries: list[PackingListEntry] = []
    for contribution in produced:
        resolution = resolve(
            contribution.quantity,
            overrides,
            trip_id=trip.id,
            rule_id=rule.id,
            person_id=contribution.person_id,
            day_index=contribution.day_index,
        )
        if resolution.excluded or resolution.quantity <= 0:
            continue
        # Extras only accompany the formula's own quantity
        if contribution.is_extra and resolution.replaces_quantity:
            continue
        entries.append(
            PackingListEntry(
                rule_id=rule.id,
                rule_hash=digest,
                person_id=contribution.person_id,
                day_index=contribution.day_index,
                day_end=contribution.day_end,
                item_name=rule.name,
                quantity=resolution.quantity,
                is_extra=contribution.is_extra,
                is_overridden=resolution.override is not None,
            )
        )
    return entries


def _sort_key(entry: PackingListEntry) -> tuple:
    return (
        entry.day_index is not None,
        entry.day_index or 0,
        entry.person_id is not None,
        entry.person_id or "",
        entry.rule_id,
        entry.is_extra,
    )


def compute_packing_list(
    trip: Trip,
    days: Sequence[Day],
    people: Sequence[Person],
    trip_rules: Sequence[TripRule],
    rules: Sequence[DefaultItemRule],
    overrides: Sequence[RuleOverride],
) -> PackingListResult:
    """Materialize the packing list for a trip.

    For every rule attached to the trip, evaluate its conditions over every
    (person, day) pair, compute quantities at the formula's granularity and
    apply overrides at each produced scope. Soft-deleted entities are ignored
    at every stage; zero-quantity and excluded entries are omitted.

    Args:
        trip: Trip being planned
        days: Trip days; a day's position is its day_index
        people: People (filtered to the trip)
        trip_rules: Rule attachments (filtered to the trip)
        rules: Rule templates
        overrides: Rule overrides (filtered to the trip)

    Returns:
        Entries ordered by day index, person id, rule id, plus diagnostics
    """
    started = time.perf_counter()
    diagnostics: list[Diagnostic] = []

    active_people = sorted(
        (p for p in people if not p.is_deleted and p.trip_id == trip.id),
        key=lambda p: p.id,
    )
    active_days = [(index, day) for index, day in enumerate(days) if not day.is_deleted]
    active_overrides = [o for o in overrides if not o.is_deleted and o.trip_id == trip.id]
    attached = _attached_rules(trip, trip_rules, rules)

    diagnostics.extend(scope_conflicts(active_overrides))

    entries: list[PackingListEntry] = []
    for rule in attached:
        pairs = _matched_pairs(rule, active_people, active_days, diagnostics)
        entries.extend(_entries_for_rule(trip, rule, pairs, active_overrides, diagnostics))

    entries.sort(key=_sort_key)

    latency_ms = (time.perf_counter() - started) * 1000
    _metrics.record_compute(latency_ms, len(entries))
    for diagnostic in diagnostics:
        _metrics.inc_diagnostic(diagnostic.kind.value)
        _logger.log_diagnostic(diagnostic)
    _logger.log_compute(trip.id, len(attached), len(entries), len(diagnostics), latency_ms)

    return PackingListResult(entries=entries, diagnostics=diagnostics)


def compute_for_snapshot(snapshot: TripSnapshot) -> PackingListResult:
    """Run the engine over a canonical snapshot."""
    return compute_packing_list(
        snapshot.trip,
        snapshot.days,
        snapshot.people,
        snapshot.trip_rules,
        snapshot.rules,
        snapshot.overrides,
    )
