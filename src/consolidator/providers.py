"""Providers for consolidator service."""

from functools import cache

from src.consolidator.service import ConsolidatorService


@cache
def consolidator_service() -> ConsolidatorService:
    """Provide a cached instance of the ConsolidatorService."""
    return ConsolidatorService()
