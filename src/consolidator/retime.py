"""Retime detection for timeline placements."""

import logging

from src.common.base_master_model import BaseMasterModel
from src.consolidator.schemas import ClipRecord, RetimeProbe

logger = logging.getLogger(__name__)

# Both thresholds must be exceeded; 1-2 frame trims are not retimes
MIN_FRAME_DIFF = 3
MIN_PERCENT_DIFF = 3.0

NORMAL_SPEED = 100.0

RETIME_ATTRIBUTES = (
    "Retime Process",
    "Motion Estimation",
    "Frame Interpolation",
    "Retime Curve",
)
DEFAULT_ATTRIBUTE_VALUES = frozenset({"", "None"})


class RetimeResult(BaseMasterModel):
    """Outcome of retime detection for one placement."""

    is_retimed: bool
    retime_percentage: float | None = None
    reason: str = ""


def detect_retime(probe: RetimeProbe) -> RetimeResult:
    """Classify a placement as speed-altered.

    Duration mismatch is checked first. If it does not flag the placement,
    or durations are unavailable, the explicit speed value and then the
    named retime attributes are inspected.
    """
    timeline_duration = probe.timeline_duration
    source_duration = probe.source_duration

    if timeline_duration is not None and source_duration:
        frame_diff = abs(timeline_duration - source_duration)
        speed_percent = (timeline_duration / source_duration) * 100
        percent_diff = abs(speed_percent - NORMAL_SPEED)
        if frame_diff > MIN_FRAME_DIFF and percent_diff > MIN_PERCENT_DIFF:
            return RetimeResult(
                is_retimed=True,
                retime_percentage=speed_percent,
                reason="duration mismatch",
            )

    return _check_retime_properties(probe)


def _check_retime_properties(probe: RetimeProbe) -> RetimeResult:
    if probe.speed is not None and probe.speed != NORMAL_SPEED:
        return RetimeResult(
            is_retimed=True,
            retime_percentage=probe.speed,
            reason="speed property",
        )

    for attribute in RETIME_ATTRIBUTES:
        value = probe.attributes.get(attribute)
        if value is not None and value not in DEFAULT_ATTRIBUTE_VALUES:
            return RetimeResult(is_retimed=True, reason=f"{attribute}: {value}")

    return RetimeResult(is_retimed=False)


def annotate_retime(record: ClipRecord) -> ClipRecord:
    """Return a copy of the record with retime fields filled in."""
    result = detect_retime(record.probe)
    if not result.is_retimed:
        return record

    if result.retime_percentage is not None:
        logger.info(
            "[retime] %s at %d: %.1f%% (%s)",
            record.display_name,
            record.timeline_inpoint,
            result.retime_percentage,
            result.reason,
        )
    else:
        logger.info(
            "[retime] %s at %d: unknown speed (%s)",
            record.display_name,
            record.timeline_inpoint,
            result.reason,
        )

    return record.model_copy(
        update={
            "is_retimed": True,
            "retime_percentage": result.retime_percentage,
        }
    )
