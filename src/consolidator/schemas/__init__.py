"""Consolidator schemas."""

from src.consolidator.schemas.clip_record import ClipRecord, RetimeProbe
from src.consolidator.schemas.config import (
    DEFAULT_CONNECTION_THRESHOLD,
    ConsolidationConfig,
)
from src.consolidator.schemas.duplicate_cluster import (
    DuplicateCluster,
    DuplicateMatchPolicy,
)
from src.consolidator.schemas.plan import ConsolidationPlan, PlanEntry
from src.consolidator.schemas.sort_policy import SortPolicy

__all__ = [
    "ClipRecord",
    "RetimeProbe",
    "DEFAULT_CONNECTION_THRESHOLD",
    "ConsolidationConfig",
    "DuplicateCluster",
    "DuplicateMatchPolicy",
    "ConsolidationPlan",
    "PlanEntry",
    "SortPolicy",
]
