"""Carry packed check marks from a previous list onto a recomputed one."""

from collections.abc import Sequence

from packing_core.models.packing import PackingListEntry


def carry_packed_state(
    entries: Sequence[PackingListEntry],
    previous: Sequence[PackingListEntry],
) -> list[PackingListEntry]:
    """Copy `is_packed` onto entries whose rule content and cell are unchanged.

    Entries are matched on (rule_id, rule_hash, person_id, day_index, is_extra);
    an edited rule gets a new hash and starts unpacked.
    """
    packed = {entry.key for entry in previous if entry.is_packed}
    return [
        entry.model_copy(update={"is_packed": entry.key in packed}) for entry in entries
    ]
