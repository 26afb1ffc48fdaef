"""Providers for timeline builder service."""

from functools import cache

from src.timeline_builder.service import TimelineBuilderService


@cache
def timeline_builder_service() -> TimelineBuilderService:
    """Provide a cached instance of the TimelineBuilderService."""
    return TimelineBuilderService()
