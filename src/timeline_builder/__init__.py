"""Master timeline builder."""

from src.timeline_builder.service import (
    BuildReport,
    TimelineBuilderService,
    strip_non_video_tracks,
)

__all__ = ["BuildReport", "TimelineBuilderService", "strip_non_video_tracks"]
