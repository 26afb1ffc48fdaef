"""Clip consolidation engine."""

from src.consolidator.duplicates import are_duplicates, find_duplicate_clusters
from src.consolidator.errors import ConsolidationInvariantError
from src.consolidator.grouping import group_by_source
from src.consolidator.merging import connects, merge_group, merge_records
from src.consolidator.retime import RetimeResult, annotate_retime, detect_retime
from src.consolidator.service import ConsolidatorService
from src.consolidator.sorting import sort_records

__all__ = [
    "ConsolidationInvariantError",
    "ConsolidatorService",
    "RetimeResult",
    "annotate_retime",
    "are_duplicates",
    "connects",
    "detect_retime",
    "find_duplicate_clusters",
    "group_by_source",
    "merge_group",
    "merge_records",
    "sort_records",
]
