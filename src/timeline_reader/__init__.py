"""OTIO timeline reader."""

from src.timeline_reader.read_otio import (
    ReadResult,
    SkippedPlacement,
    iter_timelines,
    read_otio_file,
    read_otio_files,
    read_otio_object,
    read_timeline,
)

__all__ = [
    "ReadResult",
    "SkippedPlacement",
    "iter_timelines",
    "read_otio_file",
    "read_otio_files",
    "read_otio_object",
    "read_timeline",
]
