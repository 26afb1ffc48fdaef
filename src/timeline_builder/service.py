"""TimelineBuilder service for turning a consolidation plan into OTIO."""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import opentimelineio as otio
from pydantic import ConfigDict, Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import PlanEntry

logger = logging.getLogger(__name__)

BUILDER_NAMESPACE = "master_timeline"
REVERSE_SPEED = "-100"

AppendStrategy = Callable[[otio.schema.Track, PlanEntry], otio.schema.Clip]


class BuildReport(BaseMasterModel):
    """Outcome of appending plan entries to a new timeline."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    timeline: otio.schema.Timeline
    # Plan entry index -> clip appended for it
    clips: dict[int, otio.schema.Clip] = Field(default_factory=dict)
    failed: list[int] = Field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.clips)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class TimelineBuilderService:
    """Service for building a master timeline from plan entries."""

    def build(
        self,
        entries: Sequence[PlanEntry],
        timeline_name: str,
        video_only: bool = True,
    ) -> BuildReport:
        """Append every entry, in order, to a new timeline.

        Args:
            entries: Ordered plan entries.
            timeline_name: Name of the new timeline.
            video_only: Strip every non-video track after assembly.

        Returns:
            A BuildReport holding the timeline and per-entry outcome.
        """
        if not timeline_name:
            msg = "Found empty timeline name, refusing to build"
            raise ValueError(msg)

        frame_rate = entries[0].frame_rate if entries else 24.0
        timeline = otio.schema.Timeline(name=timeline_name)
        timeline.global_start_time = otio.opentime.RationalTime(0, frame_rate)

        video_track = otio.schema.Track(name="Video 1", kind=otio.schema.TrackKind.Video)
        audio_track = otio.schema.Track(name="Audio 1", kind=otio.schema.TrackKind.Audio)
        timeline.tracks.append(video_track)
        timeline.tracks.append(audio_track)

        clips: dict[int, otio.schema.Clip] = {}
        failed: list[int] = []

        for index, entry in enumerate(entries):
            clip = self._append_entry(video_track, entry)
            if clip is None:
                failed.append(index)
                continue
            clips[index] = clip
            audio_track.append(self._create_audio_clip(entry))

        logger.info(
            "[builder] Clip addition summary: %d succeeded, %d failed",
            len(clips),
            len(failed),
        )

        if video_only:
            strip_non_video_tracks(timeline)

        return BuildReport(timeline=timeline, clips=clips, failed=failed)

    def write(self, timeline: otio.schema.Timeline, output_path: Path) -> Path:
        """Save a timeline to an OTIO file."""
        otio.adapters.write_to_file(timeline, str(output_path))
        logger.info("[builder] Wrote %s", output_path)
        return output_path

    def _append_entry(self, track: otio.schema.Track, entry: PlanEntry) -> otio.schema.Clip | None:
        """Append one entry, trying fallbacks for reversed ranges."""
        strategies: list[tuple[str, AppendStrategy]]
        if entry.is_reversed:
            strategies = [
                ("reverse time warp", self._append_with_time_warp),
                ("speed override", self._append_with_speed_override),
                ("normalized range", self._append_normalized),
            ]
        else:
            strategies = [("normalized range", self._append_normalized)]

        for label, strategy in strategies:
            try:
                return strategy(track, entry)
            except (otio.exceptions.OTIOError, ValueError) as e:
                logger.warning(
                    "[builder] Appending %s via %s failed: %s",
                    entry.source_name or entry.source_id,
                    label,
                    e,
                )

        logger.error("[builder] Failed to add %s after all attempts", entry.source_name or entry.source_id)
        return None

    def _append_normalized(self, track: otio.schema.Track, entry: PlanEntry) -> otio.schema.Clip:
        clip = self._create_clip(entry)
        track.append(clip)
        return clip

    def _append_with_time_warp(self, track: otio.schema.Track, entry: PlanEntry) -> otio.schema.Clip:
        clip = self._create_clip(entry)
        clip.effects.append(otio.schema.LinearTimeWarp(name="Reverse", time_scalar=-1.0))
        track.append(clip)
        return clip

    def _append_with_speed_override(
        self,
        track: otio.schema.Track,
        entry: PlanEntry,
    ) -> otio.schema.Clip:
        clip = self._create_clip(entry, speed_override=REVERSE_SPEED)
        track.append(clip)
        return clip

    def _create_clip(
        self,
        entry: PlanEntry,
        speed_override: str | None = None,
    ) -> otio.schema.Clip:
        """Create an OTIO clip covering the entry's normalized range."""
        clip = otio.schema.Clip(
            name=entry.source_name or entry.source_id,
            media_reference=self._create_media_reference(entry),
            source_range=self._source_range(entry),
        )
        builder_meta = {
            "source_id": entry.source_id,
            "is_reversed": entry.is_reversed,
            "is_retimed": entry.is_retimed,
            "retime_percentage": entry.retime_percentage,
        }
        if speed_override is not None:
            builder_meta["speed_override"] = speed_override
        clip.metadata[BUILDER_NAMESPACE] = builder_meta
        return clip

    def _create_audio_clip(self, entry: PlanEntry) -> otio.schema.Clip:
        clip = otio.schema.Clip(
            name=entry.source_name or entry.source_id,
            media_reference=self._create_media_reference(entry),
            source_range=self._source_range(entry),
        )
        clip.metadata[BUILDER_NAMESPACE] = {"source_id": entry.source_id}
        return clip

    def _create_media_reference(self, entry: PlanEntry) -> otio.core.MediaReference:
        if entry.file_path:
            media_ref = otio.schema.ExternalReference(target_url=entry.file_path)
            media_ref.name = entry.source_name
            return media_ref
        return otio.schema.MissingReference(name=entry.source_name or entry.source_id)

    def _source_range(self, entry: PlanEntry) -> otio.opentime.TimeRange:
        return otio.opentime.TimeRange(
            start_time=otio.opentime.RationalTime(entry.range_start, entry.frame_rate),
            duration=otio.opentime.RationalTime(entry.frame_count, entry.frame_rate),
        )


def strip_non_video_tracks(timeline: otio.schema.Timeline) -> int:
    """Remove every non-video track from a timeline.

    Returns:
        The number of tracks removed.
    """
    removed = 0
    for index in reversed(range(len(timeline.tracks))):
        track = timeline.tracks[index]
        if track.kind != otio.schema.TrackKind.Video:
            logger.info("[builder] Removing %s track %s", track.kind, track.name)
            del timeline.tracks[index]
            removed += 1
    return removed
