"""MarkerPainter service for annotating OTIO clips."""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence

import opentimelineio as otio

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import DuplicateCluster

logger = logging.getLogger(__name__)

MARKER_NAMESPACE = "master_timeline"

DUPLICATE_PALETTE = (
    otio.schema.MarkerColor.YELLOW,
    otio.schema.MarkerColor.GREEN,
    otio.schema.MarkerColor.CYAN,
    otio.schema.MarkerColor.BLUE,
    otio.schema.MarkerColor.PURPLE,
    otio.schema.MarkerColor.PINK,
    otio.schema.MarkerColor.MAGENTA,
    otio.schema.MarkerColor.ORANGE,
)
RETIME_COLOR = otio.schema.MarkerColor.RED

DUPLICATE_NOTE = "Duplicate clip detected"
RETIME_NAME = "Retimed Clip"


class MarkerReport(BaseMasterModel):
    """Counts of marker attempts."""

    attempted: int = 0
    succeeded: int = 0

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


def duplicate_color(cluster_index: int) -> str:
    """Return the palette color for a 0-based cluster index."""
    return DUPLICATE_PALETTE[cluster_index % len(DUPLICATE_PALETTE)]


def add_marker(
    clip: otio.schema.Clip,
    name: str,
    color: str,
    note: str,
    offset: float,
) -> otio.schema.Marker:
    """Add a one-frame marker at a fraction of the clip's duration.

    Raises:
        otio.exceptions.OTIOError: If the clip has no usable range.
        ValueError: If offset is outside [0, 1].
    """
    if not 0.0 <= offset <= 1.0:
        msg = f"marker offset must be within [0, 1], got {offset}"
        raise ValueError(msg)

    trimmed = clip.trimmed_range()
    rate = trimmed.start_time.rate
    duration = trimmed.duration.to_frames()
    position = trimmed.start_time.to_frames() + math.floor(duration * offset)

    marker = otio.schema.Marker(
        name=name,
        marked_range=otio.opentime.TimeRange(
            start_time=otio.opentime.RationalTime(position, rate),
            duration=otio.opentime.RationalTime(1, rate),
        ),
        color=color,
        metadata={MARKER_NAMESPACE: {"note": note}},
    )
    clip.markers.append(marker)
    return marker


def marker_note(marker: otio.schema.Marker) -> str:
    """Return the note stored on a marker by this package, or ''."""
    namespace = marker.metadata.get(MARKER_NAMESPACE)
    if namespace is None or isinstance(namespace, str):
        return ""
    return str(namespace.get("note", ""))


def clear_markers(clip: otio.schema.Clip, note: str) -> int:
    """Delete the clip's markers carrying the given note."""
    removed = 0
    for index in reversed(range(len(clip.markers))):
        if marker_note(clip.markers[index]) == note:
            del clip.markers[index]
            removed += 1
    return removed


class MarkerPainterService:
    """Service for painting duplicate and retime markers."""

    def paint_duplicates(
        self,
        clusters: Sequence[DuplicateCluster],
        clips: Mapping[str, otio.schema.Clip],
        offset: float = 0.25,
    ) -> MarkerReport:
        """Mark every member of every duplicate cluster.

        Args:
            clusters: Clusters in discovery order; each gets one palette color.
            clips: Placement key to OTIO clip, as returned by the reader.
            offset: Marker position as a fraction of clip duration.
        """
        attempted = 0
        succeeded = 0

        for cluster in clusters:
            color = duplicate_color(cluster.index)
            set_number = cluster.index + 1
            logger.info(
                "[markers] Marking duplicate set %d with %d clips (color: %s)",
                set_number,
                cluster.size,
                color,
            )

            for position, record in enumerate(cluster.members, start=1):
                attempted += 1
                clip = clips.get(record.placement_key)
                if clip is None:
                    logger.warning("[markers] No clip for placement %s", record.placement_key)
                    continue
                name = f"Dup Set #{set_number} ({position}/{cluster.size})"
                if self._try_add(clip, name, color, DUPLICATE_NOTE, offset):
                    succeeded += 1

        if clusters and succeeded == 0:
            logger.warning("[markers] Unable to add any duplicate markers")
            for cluster in clusters:
                names = ", ".join(r.display_name for r in cluster.members)
                logger.warning("[markers] Set #%d: %s", cluster.index + 1, names)

        logger.info(
            "[markers] Added %d duplicate markers out of %d attempts",
            succeeded,
            attempted,
        )
        return MarkerReport(attempted=attempted, succeeded=succeeded)

    def paint_retimed(
        self,
        targets: Iterable[tuple[otio.schema.Clip, float | None]],
        offset: float = 0.5,
    ) -> MarkerReport:
        """Mark clips flagged as retimed, noting their speed when known."""
        attempted = 0
        succeeded = 0

        for clip, percentage in targets:
            attempted += 1
            speed = "Unknown" if percentage is None else f"{percentage:g}"
            note = f"Manual check recommended. Speed: {speed}%"
            if self._try_add(clip, RETIME_NAME, RETIME_COLOR, note, offset):
                succeeded += 1

        logger.info(
            "[markers] Added %d retime markers out of %d attempts",
            succeeded,
            attempted,
        )
        return MarkerReport(attempted=attempted, succeeded=succeeded)

    def _try_add(
        self,
        clip: otio.schema.Clip,
        name: str,
        color: str,
        note: str,
        offset: float,
    ) -> bool:
        try:
            add_marker(clip, name, color, note, offset)
        except otio.exceptions.OTIOError as e:
            logger.warning("[markers] Failed to add marker to clip %s: %s", clip.name, e)
            return False
        return True
