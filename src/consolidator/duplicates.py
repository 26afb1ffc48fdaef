"""Find placements that show the same shot more than once."""

import logging
from collections.abc import Sequence

from src.consolidator.schemas import ClipRecord, DuplicateCluster, DuplicateMatchPolicy

logger = logging.getLogger(__name__)


def _same_position(a: ClipRecord, b: ClipRecord) -> bool:
    return a.timeline_inpoint == b.timeline_inpoint and a.track_index == b.track_index


def are_duplicates(
    a: ClipRecord,
    b: ClipRecord,
    policy: DuplicateMatchPolicy = DuplicateMatchPolicy.STRICT,
) -> bool:
    """Return True if two placements show the same source at different positions."""
    if _same_position(a, b):
        return False

    same_path = bool(a.file_path) and a.file_path == b.file_path
    same_name = bool(a.source_name) and a.source_name == b.source_name

    if policy is DuplicateMatchPolicy.LOOSE:
        return same_path or same_name

    # A path match with a different name is a different clip
    return same_path and same_name


def find_duplicate_clusters(
    records: Sequence[ClipRecord],
    policy: DuplicateMatchPolicy = DuplicateMatchPolicy.STRICT,
) -> list[DuplicateCluster]:
    """Cluster duplicate placements across the whole list.

    Each unprocessed record seeds a cluster and absorbs every later
    unprocessed record that matches it. Only clusters with two or more
    members are returned, in discovery order.
    """
    processed = [False] * len(records)
    clusters: list[DuplicateCluster] = []

    for i, seed in enumerate(records):
        if processed[i]:
            continue
        processed[i] = True
        members = [seed]

        for j in range(i + 1, len(records)):
            if processed[j]:
                continue
            if are_duplicates(seed, records[j], policy):
                members.append(records[j])
                processed[j] = True

        if len(members) > 1:
            clusters.append(DuplicateCluster(index=len(clusters), members=members))
            logger.info(
                "[duplicates] Set #%d: %s x%d",
                len(clusters),
                seed.display_name,
                len(members),
            )

    if not clusters:
        logger.info("[duplicates] No duplicates among %d placements", len(records))
    return clusters
