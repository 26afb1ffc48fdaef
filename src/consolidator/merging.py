"""Merge placements of one source that overlap or nearly touch."""

import logging
from collections.abc import Sequence

from src.consolidator.errors import ConsolidationInvariantError
from src.consolidator.schemas import ClipRecord

logger = logging.getLogger(__name__)


def connects(a: ClipRecord, b: ClipRecord, threshold: int) -> bool:
    """Return True if the two source ranges overlap or their gap is <= threshold.

    Reversed ranges are compared in normalized form.
    """
    return not (
        a.normalized_end < b.normalized_start - threshold
        or b.normalized_end < a.normalized_start - threshold
    )


def merge_records(a: ClipRecord, b: ClipRecord) -> ClipRecord:
    """Return a new record spanning both inputs.

    The result keeps ``a``'s timeline position and identity fields, so ``a``
    should be the earlier-encountered record.

    Raises:
        ConsolidationInvariantError: If the records reference different sources.
    """
    if a.source_id != b.source_id:
        msg = f"Cannot merge placements of different sources: {a.source_id!r} and {b.source_id!r}"
        raise ConsolidationInvariantError(msg)

    merged_start = min(a.normalized_start, b.normalized_start)
    merged_end = max(a.normalized_end, b.normalized_end)

    logger.debug(
        "[merge] %s: %d-%d + %d-%d -> %d-%d",
        a.display_name,
        a.range_start,
        a.range_end,
        b.range_start,
        b.range_end,
        merged_start,
        merged_end,
    )

    return a.model_copy(
        update={
            "range_start": merged_start,
            "range_end": merged_end,
            "is_reversed": a.is_reversed or b.is_reversed,
            "is_retimed": a.is_retimed or b.is_retimed,
            "retime_percentage": (
                a.retime_percentage
                if a.retime_percentage is not None
                else b.retime_percentage
            ),
        }
    )


def merge_group(records: Sequence[ClipRecord], threshold: int) -> list[ClipRecord]:
    """Reduce one source group to its connected intervals.

    Records are ordered by normalized start, then reduced in place: the record
    at the cursor absorbs every later record it connects to, and the scan is
    repeated from the same cursor until nothing more connects. The result is a
    fixed point, so merging it again changes nothing.

    Raises:
        ConsolidationInvariantError: If the records do not share one source id.
        ValueError: If threshold is negative.
    """
    if threshold < 0:
        msg = f"connection threshold must be >= 0, got {threshold}"
        raise ValueError(msg)

    source_ids = {record.source_id for record in records}
    if len(source_ids) > 1:
        msg = f"Source group mixes placements of {sorted(source_ids)}"
        raise ConsolidationInvariantError(msg)

    live = sorted(records, key=lambda r: r.normalized_start)

    i = 0
    while i < len(live):
        merged = False
        j = i + 1
        while j < len(live):
            if connects(live[i], live[j], threshold):
                live[i] = merge_records(live[i], live[j])
                del live[j]
                merged = True
            else:
                j += 1
        if not merged:
            i += 1

    if len(live) < len(records):
        logger.info(
            "[merge] %s: %d placements -> %d intervals",
            live[0].display_name,
            len(records),
            len(live),
        )
    return live
