"""Shared fixtures for building records and OTIO timelines."""

from collections.abc import Callable
from typing import Any

import opentimelineio as otio
import pytest

from src.consolidator.schemas import ClipRecord

RATE = 24.0


def make_record(**overrides: Any) -> ClipRecord:
    fields: dict[str, Any] = {
        "source_id": "A",
        "source_name": "A.mov",
        "file_path": "/media/A.mov",
        "range_start": 0,
        "range_end": 10,
        "timeline_inpoint": 0,
        "track_index": 1,
    }
    fields.update(overrides)
    return ClipRecord(**fields)


def make_clip(
    path: str | None,
    start: int,
    duration: int,
    name: str = "",
    rate: float = RATE,
    metadata: dict[str, Any] | None = None,
    effects: list[otio.schema.Effect] | None = None,
) -> otio.schema.Clip:
    media_ref: otio.core.MediaReference
    if path is None:
        media_ref = otio.schema.MissingReference()
    else:
        media_ref = otio.schema.ExternalReference(target_url=path)
    clip = otio.schema.Clip(
        name=name or (path or "missing"),
        media_reference=media_ref,
        source_range=otio.opentime.TimeRange(
            start_time=otio.opentime.RationalTime(start, rate),
            duration=otio.opentime.RationalTime(duration, rate),
        ),
    )
    if metadata:
        clip.metadata.update(metadata)
    for effect in effects or []:
        clip.effects.append(effect)
    return clip


def make_gap(duration: int, rate: float = RATE) -> otio.schema.Gap:
    return otio.schema.Gap(
        source_range=otio.opentime.TimeRange(
            start_time=otio.opentime.RationalTime(0, rate),
            duration=otio.opentime.RationalTime(duration, rate),
        ),
    )


def make_timeline(
    name: str,
    video_tracks: list[list[otio.core.Item]],
    audio_tracks: list[list[otio.core.Item]] | None = None,
) -> otio.schema.Timeline:
    timeline = otio.schema.Timeline(name=name)
    for index, items in enumerate(video_tracks, start=1):
        track = otio.schema.Track(name=f"V{index}", kind=otio.schema.TrackKind.Video)
        for item in items:
            track.append(item)
        timeline.tracks.append(track)
    for index, items in enumerate(audio_tracks or [], start=1):
        track = otio.schema.Track(name=f"A{index}", kind=otio.schema.TrackKind.Audio)
        for item in items:
            track.append(item)
        timeline.tracks.append(track)
    return timeline


@pytest.fixture
def record() -> Callable[..., ClipRecord]:
    return make_record


@pytest.fixture
def clip() -> Callable[..., otio.schema.Clip]:
    return make_clip


@pytest.fixture
def gap() -> Callable[..., otio.schema.Gap]:
    return make_gap


@pytest.fixture
def timeline() -> Callable[..., otio.schema.Timeline]:
    return make_timeline
