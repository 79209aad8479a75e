"""Override resolution: most specific active override wins."""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from packing_core.models.diagnostics import Diagnostic, DiagnosticKind
from packing_core.models.rules import RuleOverride


@dataclass(frozen=True)
class Resolution:
    """Outcome of applying overrides to one scope."""

    quantity: int
    excluded: bool
    override: RuleOverride | None = None

    @property
    def replaces_quantity(self) -> bool:
        """True when the winning override set its own count or excluded the rule."""
        return self.override is not None and (
            self.excluded or self.override.override_count is not None
        )


def _applies(
    override: RuleOverride,
    trip_id: str,
    rule_id: str,
    person_id: str | None,
    day_index: int | None,
) -> bool:
    if override.is_deleted or override.trip_id != trip_id or override.rule_id != rule_id:
        return False
    if override.person_id is not None and override.person_id != person_id:
        return False
    if override.day_index is not None and override.day_index != day_index:
        return False
    return True


def _rank(override: RuleOverride) -> tuple[int, int, str]:
    return (override.scope.specificity, override.version, override.id)


def resolve(
    base_quantity: int,
    overrides: Iterable[RuleOverride],
    *,
    trip_id: str,
    rule_id: str,
    person_id: str | None = None,
    day_index: int | None = None,
) -> Resolution:
    """Apply the most specific matching override to a base quantity.

    Specificity: (person, day) > person > day > trip-wide. Equal-specificity
    duplicates fall back to the higher version, then the greater id.

    Args:
        base_quantity: Quantity computed by the rule formula
        overrides: Candidate overrides (deleted ones are ignored)
        trip_id: Trip the scope belongs to
        rule_id: Rule the scope belongs to
        person_id: Person of the scope, if any
        day_index: First day of the scope, if any

    Returns:
        Resolution with the final quantity and exclusion flag
    """
    candidates = [
        o for o in overrides if _applies(o, trip_id, rule_id, person_id, day_index)
    ]
    if not candidates:
        return Resolution(quantity=base_quantity, excluded=False)

    winner = max(candidates, key=_rank)
    if winner.is_excluded:
        return Resolution(quantity=0, excluded=True, override=winner)
    if winner.override_count is not None:
        return Resolution(quantity=winner.override_count, excluded=False, override=winner)
    return Resolution(quantity=base_quantity, excluded=False, override=winner)


def scope_conflicts(overrides: Sequence[RuleOverride]) -> list[Diagnostic]:
    """Report active overrides that share the same (trip, rule, scope) key.

    Each duplicated key is reported once, naming the override that wins.
    """
    by_key: dict[tuple[str, str, str | None, int | None], list[RuleOverride]] = defaultdict(list)
    for override in overrides:
        if override.is_deleted:
            continue
        key = (override.trip_id, override.rule_id, override.person_id, override.day_index)
        by_key[key].append(override)

    diagnostics: list[Diagnostic] = []
    for (trip_id, rule_id, person_id, day_index), group in sorted(
        by_key.items(), key=lambda item: tuple(str(part) for part in item[0])
    ):
        if len(group) < 2:
            continue
        winner = max(group, key=_rank)
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.OVERRIDE_SCOPE_CONFLICT,
                code="DUPLICATE_OVERRIDE",
                message="Several active overrides target the same rule scope; the highest version wins.",
                entity_ids=sorted(o.id for o in group),
                details={
                    "trip_id": trip_id,
                    "rule_id": rule_id,
                    "person_id": person_id,
                    "day_index": day_index,
                    "winner_id": winner.id,
                },
            )
        )
    return diagnostics
