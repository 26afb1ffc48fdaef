"""Consolidation plan schemas."""

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas.clip_record import ClipRecord
from src.consolidator.schemas.duplicate_cluster import DuplicateCluster


class PlanEntry(BaseMasterModel):
    """One consolidated source range to append to the master timeline.

    The range is always normalized; playback direction is carried by
    ``is_reversed``.
    """

    source_id: str
    source_name: str
    file_path: str | None
    range_start: int
    range_end: int
    is_reversed: bool
    is_retimed: bool
    retime_percentage: float | None
    timeline_inpoint: int
    frame_rate: float

    @classmethod
    def from_record(cls, record: ClipRecord) -> "PlanEntry":
        return cls(
            source_id=record.source_id,
            source_name=record.source_name,
            file_path=record.file_path,
            range_start=record.normalized_start,
            range_end=record.normalized_end,
            is_reversed=record.is_reversed,
            is_retimed=record.is_retimed,
            retime_percentage=record.retime_percentage,
            timeline_inpoint=record.timeline_inpoint,
            frame_rate=record.frame_rate,
        )

    @property
    def frame_count(self) -> int:
        return self.range_end - self.range_start + 1


class ConsolidationPlan(BaseMasterModel):
    """Ordered plan plus annotations produced by one consolidation run."""

    entries: list[PlanEntry]
    duplicate_clusters: list[DuplicateCluster]
    retimed_records: list[ClipRecord]

    input_count: int
    disabled_count: int
    skipped_count: int = 0
    group_count: int

    @property
    def reversed_count(self) -> int:
        return sum(1 for entry in self.entries if entry.is_reversed)
