"""Duplicate cluster schemas."""

from enum import StrEnum, auto

from pydantic import Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas.clip_record import ClipRecord


class DuplicateMatchPolicy(StrEnum):
    """Rule deciding whether two placements show the same shot."""

    # Same file path, or same non-empty source name
    LOOSE = auto()
    # Same file path and same source name
    STRICT = auto()


class DuplicateCluster(BaseMasterModel):
    """Placements judged to be the same shot at distinct timeline positions."""

    index: int
    members: list[ClipRecord] = Field(min_length=2)

    @property
    def size(self) -> int:
        return len(self.members)
