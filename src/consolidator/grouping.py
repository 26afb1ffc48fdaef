"""Partition placements by source media."""

from collections.abc import Iterable

from src.consolidator.errors import ConsolidationInvariantError
from src.consolidator.schemas import ClipRecord


def group_by_source(records: Iterable[ClipRecord]) -> dict[str, list[ClipRecord]]:
    """Group records by ``source_id``.

    Groups appear in first-seen order and keep the relative input order of
    their members.

    Raises:
        ConsolidationInvariantError: If a record has an empty ``source_id``.
    """
    groups: dict[str, list[ClipRecord]] = {}
    for record in records:
        if not record.source_id:
            msg = f"Cannot group placement {record.placement_key or '?'} without a source id"
            raise ConsolidationInvariantError(msg)
        groups.setdefault(record.source_id, []).append(record)
    return groups
