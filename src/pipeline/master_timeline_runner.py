"""Pipeline runner that assembles a master timeline from source timelines."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import opentimelineio as otio
from pydantic import ConfigDict, Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.duplicates import find_duplicate_clusters
from src.consolidator.providers import consolidator_service
from src.consolidator.schemas import (
    ConsolidationConfig,
    ConsolidationPlan,
    DuplicateMatchPolicy,
)
from src.marker_painter.providers import marker_painter_service
from src.marker_painter.service import MarkerReport
from src.timeline_builder.providers import timeline_builder_service
from src.timeline_builder.service import strip_non_video_tracks
from src.timeline_reader.read_otio import (
    ReadResult,
    iter_timelines,
    read_otio_files,
    read_otio_object,
    read_timeline,
)

logger = logging.getLogger(__name__)


class RunReport(BaseMasterModel):
    """Everything a caller needs to report on one master timeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    timeline: otio.schema.Timeline
    plan: ConsolidationPlan
    appended: int
    append_failed: int
    duplicate_markers: MarkerReport = Field(default_factory=MarkerReport)
    retime_markers: MarkerReport = Field(default_factory=MarkerReport)
    output_path: Path | None = None

    def summary(self) -> dict[str, Any]:
        return {
            "timeline_name": self.timeline.name,
            "input_placements": self.plan.input_count,
            "skipped_placements": self.plan.skipped_count,
            "disabled_placements": self.plan.disabled_count,
            "sources": self.plan.group_count,
            "entries": len(self.plan.entries),
            "appended": self.appended,
            "append_failed": self.append_failed,
            "duplicate_sets": len(self.plan.duplicate_clusters),
            "duplicate_markers": self.duplicate_markers.succeeded,
            "retimed_entries": sum(1 for e in self.plan.entries if e.is_retimed),
            "retime_markers": self.retime_markers.succeeded,
            "output_path": str(self.output_path) if self.output_path else None,
        }


class MasterTimelineRunner:
    """Orchestrates reading, consolidation, assembly and marking."""

    def __init__(self, config: ConsolidationConfig | None = None) -> None:
        """Initialize the runner.

        Args:
            config: Options shared by every stage of the run.
        """
        self.config = config or ConsolidationConfig()

    def run_files(
        self,
        input_paths: Iterable[Path],
        timeline_name: str,
        output_path: Path | None = None,
    ) -> RunReport:
        """Build a master timeline from OTIO files on disk."""
        return self.run(read_otio_files(input_paths), timeline_name, output_path)

    def run(
        self,
        read: ReadResult,
        timeline_name: str,
        output_path: Path | None = None,
    ) -> RunReport:
        """Consolidate read placements and assemble the master timeline."""
        config = self.config
        if not read.records:
            logger.warning("[runner] No valid clips found to process")

        plan = consolidator_service().consolidate(
            read.records,
            config.model_copy(update={"mark_duplicates": False}),
            skipped_count=read.skipped_count,
        )

        build = timeline_builder_service().build(
            plan.entries,
            timeline_name,
            video_only=config.video_only,
        )
        timeline = build.timeline

        painter = marker_painter_service()
        duplicate_markers = MarkerReport()
        retime_markers = MarkerReport()

        if config.mark_duplicates:
            logger.info("[runner] Marking duplicates in the new timeline")
            built = read_timeline(timeline)
            clusters = find_duplicate_clusters(built.records, config.duplicate_policy)
            plan = plan.model_copy(update={"duplicate_clusters": clusters})
            duplicate_markers = painter.paint_duplicates(
                clusters,
                built.clips,
                offset=config.duplicate_marker_offset,
            )

        if config.mark_retimed:
            logger.info("[runner] Marking retimed clips in the new timeline")
            targets = [
                (build.clips[index], entry.retime_percentage)
                for index, entry in enumerate(plan.entries)
                if entry.is_retimed and index in build.clips
            ]
            retime_markers = painter.paint_retimed(
                targets,
                offset=config.retime_marker_offset,
            )

        if output_path is not None:
            output_path = timeline_builder_service().write(timeline, output_path)

        logger.info("[runner] New timeline created: %s", timeline_name)
        return RunReport(
            timeline=timeline,
            plan=plan,
            appended=build.succeeded_count,
            append_failed=build.failed_count,
            duplicate_markers=duplicate_markers,
            retime_markers=retime_markers,
            output_path=output_path,
        )


def mark_duplicates_in_file(
    otio_path: Path,
    output_path: Path | None = None,
    policy: DuplicateMatchPolicy = DuplicateMatchPolicy.LOOSE,
    offset: float = 0.25,
) -> MarkerReport:
    """Mark duplicate clips on the timelines of an existing OTIO file."""
    obj = otio.adapters.read_from_file(str(otio_path))
    read = read_otio_object(obj, source_label=otio_path.name)
    clusters = find_duplicate_clusters(read.records, policy)
    report = marker_painter_service().paint_duplicates(clusters, read.clips, offset=offset)
    otio.adapters.write_to_file(obj, str(output_path or otio_path))
    return report


def strip_audio_in_file(otio_path: Path, output_path: Path | None = None) -> int:
    """Remove the non-video tracks of every timeline in an OTIO file."""
    obj = otio.adapters.read_from_file(str(otio_path))
    removed = sum(strip_non_video_tracks(t) for t in iter_timelines(obj))
    otio.adapters.write_to_file(obj, str(output_path or otio_path))
    logger.info("[runner] Removed %d tracks from %s", removed, otio_path.name)
    return removed
