"""Consolidator service for turning placements into an ordered plan."""

import logging
from collections.abc import Iterable

from src.consolidator.duplicates import find_duplicate_clusters
from src.consolidator.grouping import group_by_source
from src.consolidator.merging import merge_group
from src.consolidator.retime import annotate_retime
from src.consolidator.schemas import (
    ClipRecord,
    ConsolidationConfig,
    ConsolidationPlan,
    PlanEntry,
)
from src.consolidator.sorting import sort_records

logger = logging.getLogger(__name__)


class ConsolidatorService:
    """Service for consolidating timeline placements into a master plan."""

    def consolidate(
        self,
        records: Iterable[ClipRecord],
        config: ConsolidationConfig | None = None,
        skipped_count: int = 0,
    ) -> ConsolidationPlan:
        """Group, merge and order placements.

        Args:
            records: Placements read from one or more timelines.
            config: Options for this run. Defaults are used when omitted.
            skipped_count: Placements the reader already dropped, reported back
                unchanged.

        Returns:
            A ConsolidationPlan with ordered entries and annotations.

        Raises:
            ConsolidationInvariantError: If a record has no source id.
        """
        config = config or ConsolidationConfig()
        records = list(records)

        active = [r for r in records if config.include_disabled or r.enabled]
        disabled_count = len(records) - len(active)
        if disabled_count:
            logger.info("[consolidate] Skipping %d disabled placements", disabled_count)

        if config.mark_retimed:
            active = [annotate_retime(r) for r in active]
        retimed = [r for r in active if r.is_retimed]

        groups = group_by_source(active)
        logger.info(
            "[consolidate] %d placements from %d sources (threshold=%d)",
            len(active),
            len(groups),
            config.connection_threshold,
        )

        merged: list[ClipRecord] = []
        for group in groups.values():
            merged.extend(merge_group(group, config.connection_threshold))

        ordered = sort_records(merged, config.sort_policy)
        logger.info(
            "[consolidate] %d intervals ordered by %s",
            len(ordered),
            config.sort_policy,
        )

        clusters = (
            find_duplicate_clusters(active, config.duplicate_policy)
            if config.mark_duplicates
            else []
        )

        return ConsolidationPlan(
            entries=[PlanEntry.from_record(r) for r in ordered],
            duplicate_clusters=clusters,
            retimed_records=retimed,
            input_count=len(records),
            disabled_count=disabled_count,
            skipped_count=skipped_count,
            group_count=len(groups),
        )
