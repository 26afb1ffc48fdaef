"""Shot number assignment."""

from src.shot_numbering.service import (
    ShotNumberingConfig,
    ShotNumberingReport,
    ShotNumberingService,
    get_shot,
    set_shot,
)

__all__ = [
    "ShotNumberingConfig",
    "ShotNumberingReport",
    "ShotNumberingService",
    "get_shot",
    "set_shot",
]
