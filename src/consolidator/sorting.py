"""Total ordering of consolidated records."""

from collections.abc import Callable, Sequence
from typing import Any

from src.consolidator.schemas import ClipRecord, SortPolicy

SortKey = Callable[[ClipRecord], tuple[Any, ...]]


def _tie_break(record: ClipRecord) -> tuple[Any, ...]:
    # Exhaustive so that distinct records never compare equal
    return (
        record.source_id,
        record.normalized_start,
        record.normalized_end,
        record.track_index,
        record.is_reversed,
        record.placement_key,
    )


def _source_inpoint_key(record: ClipRecord) -> tuple[Any, ...]:
    return (record.normalized_start, record.timeline_inpoint, *_tie_break(record))


def _source_name_key(record: ClipRecord) -> tuple[Any, ...]:
    return (record.source_name, record.timeline_inpoint, *_tie_break(record))


def _timeline_inpoint_key(record: ClipRecord) -> tuple[Any, ...]:
    return (record.timeline_inpoint, *_tie_break(record))


def _reel_name_key(record: ClipRecord) -> tuple[Any, ...]:
    # Reel-named records first; records without a reel fall back to source name
    if record.reel_name:
        return (0, record.reel_name, record.timeline_inpoint, *_tie_break(record))
    return (1, record.source_name, record.timeline_inpoint, *_tie_break(record))


SORT_KEYS: dict[SortPolicy, SortKey] = {
    SortPolicy.SOURCE_INPOINT: _source_inpoint_key,
    SortPolicy.SOURCE_NAME: _source_name_key,
    SortPolicy.TIMELINE_INPOINT: _timeline_inpoint_key,
    SortPolicy.REEL_NAME: _reel_name_key,
}


def sort_key_for(policy: SortPolicy) -> SortKey | None:
    """Return the key function for a policy, or None when order is preserved."""
    return SORT_KEYS.get(policy)


def sort_records(
    records: Sequence[ClipRecord],
    policy: SortPolicy = SortPolicy.SOURCE_NAME,
) -> list[ClipRecord]:
    """Return the records ordered under the given policy.

    ``SortPolicy.NONE`` keeps the input order.
    """
    key = sort_key_for(policy)
    if key is None:
        return list(records)
    return sorted(records, key=key)
