"""Providers for shot numbering service."""

from functools import cache

from src.shot_numbering.service import ShotNumberingService


@cache
def shot_numbering_service() -> ShotNumberingService:
    """Provide a cached instance of the ShotNumberingService."""
    return ShotNumberingService()
