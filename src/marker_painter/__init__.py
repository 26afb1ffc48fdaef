"""Timeline marker painting."""

from src.marker_painter.service import (
    DUPLICATE_PALETTE,
    MarkerPainterService,
    MarkerReport,
    add_marker,
    clear_markers,
    duplicate_color,
    marker_note,
)

__all__ = [
    "DUPLICATE_PALETTE",
    "MarkerPainterService",
    "MarkerReport",
    "add_marker",
    "clear_markers",
    "duplicate_color",
    "marker_note",
]
