"""API request schemas."""

from pydantic import Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import DuplicateMatchPolicy, SortPolicy


class ConsolidateOptions(BaseMasterModel):
    """Per-request overrides of the environment configuration."""

    connection_threshold: int | None = Field(default=None, ge=0)
    include_disabled: bool | None = None
    sort_policy: SortPolicy | None = None
    mark_duplicates: bool | None = None
    duplicate_policy: DuplicateMatchPolicy | None = None
    mark_retimed: bool | None = None
    video_only: bool | None = None

    def overrides(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)
