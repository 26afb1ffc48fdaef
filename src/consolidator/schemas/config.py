"""Consolidation configuration schema."""

from pydantic import Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas.duplicate_cluster import DuplicateMatchPolicy
from src.consolidator.schemas.sort_policy import SortPolicy

DEFAULT_CONNECTION_THRESHOLD = 25


class ConsolidationConfig(BaseMasterModel):
    """Options for one consolidation run."""

    # Max gap in frames between two placements of one source that still merge
    connection_threshold: int = Field(default=DEFAULT_CONNECTION_THRESHOLD, ge=0)
    include_disabled: bool = False
    sort_policy: SortPolicy = SortPolicy.SOURCE_NAME

    mark_duplicates: bool = True
    duplicate_policy: DuplicateMatchPolicy = DuplicateMatchPolicy.STRICT
    mark_retimed: bool = True
    video_only: bool = True

    # Marker positions as a fraction of each clip's duration
    duplicate_marker_offset: float = Field(default=0.25, ge=0.0, le=1.0)
    retime_marker_offset: float = Field(default=0.5, ge=0.0, le=1.0)
