"""API response schemas."""

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import ConsolidationPlan
from src.timeline_reader.read_otio import SkippedPlacement


class ConsolidateResponse(BaseMasterModel):
    """Response containing the consolidation plan for uploaded timelines."""

    timeline_names: list[str]
    plan: ConsolidationPlan
    skipped: list[SkippedPlacement]
