"""ShotNumbering service for assigning shot numbers along a timeline."""

import logging

import opentimelineio as otio
from pydantic import Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import ClipRecord
from src.marker_painter.service import add_marker, clear_markers
from src.timeline_reader.read_otio import read_timeline

logger = logging.getLogger(__name__)

SHOT_NAMESPACE = "master_timeline"
SHOT_KEY = "shot"
SHOT_MARKER_NOTE = "Shotnumber"
SHOT_MARKER_OFFSET = 0.5


class ShotNumberingConfig(BaseMasterModel):
    """Options for shot number assignment."""

    padding: int = Field(default=4, ge=1, le=10)
    increment: int = Field(default=10, ge=1, le=100)
    clear_existing: bool = False

    def format(self, number: int) -> str:
        return f"{number:0{self.padding}d}"


class ShotNumberingReport(BaseMasterModel):
    """Outcome of one shot numbering pass."""

    assigned: int = 0
    skipped: int = 0
    cleared_markers: int = 0
    cleared_values: int = 0
    unreadable: int = 0


def get_shot(clip: otio.schema.Clip) -> str:
    """Return the shot value stored on a clip, or ''."""
    namespace = clip.metadata.get(SHOT_NAMESPACE)
    if namespace is None or isinstance(namespace, str):
        return ""
    return str(namespace.get(SHOT_KEY) or "")


def set_shot(clip: otio.schema.Clip, value: str) -> None:
    namespace = clip.metadata.get(SHOT_NAMESPACE)
    values = {} if namespace is None or isinstance(namespace, str) else dict(namespace)
    values[SHOT_KEY] = value
    clip.metadata[SHOT_NAMESPACE] = values


class ShotNumberingService:
    """Service for numbering the shots of a timeline in playback order."""

    def apply(
        self,
        timeline: otio.schema.Timeline,
        config: ShotNumberingConfig | None = None,
    ) -> ShotNumberingReport:
        """Assign shot numbers to the video clips of a timeline.

        Clips are visited by start position, lower track first on ties. A
        shot value belongs to the source media, so once a source is numbered
        every placement of it carries the same value. Placements whose source
        already has a value are skipped and get a green marker when the value
        matches the number they would receive, red otherwise.
        """
        config = config or ShotNumberingConfig()
        read = read_timeline(timeline)
        ordered = sorted(read.records, key=lambda r: (r.timeline_inpoint, r.track_index))

        cleared_markers = sum(
            clear_markers(clip, SHOT_MARKER_NOTE) for clip in read.clips.values()
        )
        cleared_values = 0
        if config.clear_existing:
            for clip in read.clips.values():
                if get_shot(clip):
                    set_shot(clip, "")
                    cleared_values += 1
            logger.info("[shots] Cleared shot values from %d clips", cleared_values)

        by_source = self._clips_by_source(read.records, read.clips)
        source_shots: dict[str, str] = {}
        for source_id, clips in by_source.items():
            existing = next((get_shot(c) for c in clips if get_shot(c)), "")
            if existing:
                source_shots[source_id] = existing

        assigned = 0
        skipped = 0
        number = config.increment

        for record in ordered:
            clip = read.clips[record.placement_key]
            shot_value = config.format(number)
            current = source_shots.get(record.source_id, "")

            if not current:
                for placement in by_source[record.source_id]:
                    set_shot(placement, shot_value)
                source_shots[record.source_id] = shot_value
                assigned += 1
                logger.info(
                    "[shots] Set %s for %s (position %d, track V%d)",
                    shot_value,
                    record.display_name,
                    record.timeline_inpoint,
                    record.track_index,
                )
            else:
                color = (
                    otio.schema.MarkerColor.GREEN
                    if current == shot_value
                    else otio.schema.MarkerColor.RED
                )
                add_marker(clip, shot_value, color, SHOT_MARKER_NOTE, SHOT_MARKER_OFFSET)
                skipped += 1
                logger.info(
                    "[shots] Skipped %s: has shot %s, would get %s",
                    record.display_name,
                    current,
                    shot_value,
                )

            number += config.increment

        logger.info("[shots] %d clips numbered, %d skipped", assigned, skipped)
        return ShotNumberingReport(
            assigned=assigned,
            skipped=skipped,
            cleared_markers=cleared_markers,
            cleared_values=cleared_values,
            unreadable=read.skipped_count,
        )

    def _clips_by_source(
        self,
        records: list[ClipRecord],
        clips: dict[str, otio.schema.Clip],
    ) -> dict[str, list[otio.schema.Clip]]:
        by_source: dict[str, list[otio.schema.Clip]] = {}
        for record in records:
            by_source.setdefault(record.source_id, []).append(clips[record.placement_key])
        return by_source
