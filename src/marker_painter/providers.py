"""Providers for marker painter service."""

from functools import cache

from src.marker_painter.service import MarkerPainterService


@cache
def marker_painter_service() -> MarkerPainterService:
    """Provide a cached instance of the MarkerPainterService."""
    return MarkerPainterService()
