"""Clip record schema."""

from pydantic import Field, ValidationInfo, field_validator

from src.common.base_master_model import BaseMasterModel


class RetimeProbe(BaseMasterModel):
    """Raw retime inputs read from a placement.

    ``None`` means the value could not be read from the source timeline.
    """

    timeline_duration: int | None = None
    source_duration: int | None = None
    speed: float | None = None
    attributes: dict[str, str] = Field(default_factory=dict)


class ClipRecord(BaseMasterModel):
    """One placement of a source media item on a timeline track."""

    source_id: str
    source_name: str = ""
    reel_name: str = ""
    file_path: str | None = None

    # Source frames consumed by the placement, end inclusive.
    # range_start > range_end marks a time-reversed placement.
    range_start: int
    range_end: int

    timeline_inpoint: int = 0
    track_index: int = 1
    enabled: bool = True
    frame_rate: float = 24.0
    placement_key: str = ""

    is_reversed: bool = Field(default=False, validate_default=True)
    is_retimed: bool = False
    retime_percentage: float | None = None

    probe: RetimeProbe = Field(default_factory=RetimeProbe)

    @field_validator("is_reversed")
    @classmethod
    def _derive_reversed(cls, value: bool, info: ValidationInfo) -> bool:
        start = info.data.get("range_start")
        end = info.data.get("range_end")
        if start is None or end is None:
            return value
        return value or start > end

    @property
    def normalized_start(self) -> int:
        """First source frame regardless of playback direction."""
        return min(self.range_start, self.range_end)

    @property
    def normalized_end(self) -> int:
        """Last source frame regardless of playback direction."""
        return max(self.range_start, self.range_end)

    @property
    def display_name(self) -> str:
        return self.source_name or self.source_id
