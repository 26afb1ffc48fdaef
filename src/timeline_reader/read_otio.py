"""Read OTIO timelines into clip records."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import opentimelineio as otio
from pydantic import ConfigDict, Field

from src.common.base_master_model import BaseMasterModel
from src.consolidator.retime import RETIME_ATTRIBUTES
from src.consolidator.schemas import ClipRecord, RetimeProbe

logger = logging.getLogger(__name__)

# Metadata namespace written by the timeline builder
BUILDER_NAMESPACE = "master_timeline"

SOURCE_ID_KEYS = ("media_id", "Media ID")
REEL_NAME_KEYS = ("Reel Name", "reel_name", "reel")
SPEED_KEYS = ("Speed", "speed")


class SkippedPlacement(BaseMasterModel):
    """A placement the reader could not turn into a record."""

    placement_key: str
    reason: str


class ReadResult(BaseMasterModel):
    """Placements read from one or more timelines."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    records: list[ClipRecord] = Field(default_factory=list)
    # Placement key -> OTIO clip the record was read from
    clips: dict[str, otio.schema.Clip] = Field(default_factory=dict)
    skipped: list[SkippedPlacement] = Field(default_factory=list)
    timeline_names: list[str] = Field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @classmethod
    def combine(cls, results: Iterable["ReadResult"]) -> "ReadResult":
        """Concatenate results in order.

        Raises:
            ValueError: If two results share a placement key.
        """
        records: list[ClipRecord] = []
        clips: dict[str, otio.schema.Clip] = {}
        skipped: list[SkippedPlacement] = []
        timeline_names: list[str] = []

        for result in results:
            keys = set(result.clips) | {s.placement_key for s in result.skipped}
            collisions = keys & (set(clips) | {s.placement_key for s in skipped})
            if collisions:
                msg = f"Placement keys read twice: {sorted(collisions)}"
                raise ValueError(msg)
            records.extend(result.records)
            clips.update(result.clips)
            skipped.extend(result.skipped)
            timeline_names.extend(result.timeline_names)

        return cls(
            records=records,
            clips=clips,
            skipped=skipped,
            timeline_names=timeline_names,
        )


def iter_timelines(obj: Any) -> Iterator[otio.schema.Timeline]:
    """Yield every timeline in an OTIO object, descending into collections."""
    if isinstance(obj, otio.schema.Timeline):
        yield obj
    elif isinstance(obj, otio.schema.SerializableCollection):
        for child in obj:
            yield from iter_timelines(child)
    else:
        logger.info("[reader] Skipping non-timeline item: %s", type(obj).__name__)


def read_otio_files(paths: Iterable[Path]) -> ReadResult:
    """Read every timeline found in the given OTIO files.

    Timelines are numbered across all files, so placement keys stay unique
    even when two files hold timelines of the same name.
    """
    results: list[ReadResult] = []
    timeline_count = 0
    for path in paths:
        logger.info("[reader] Reading %s", path)
        result = read_otio_file(path, first_index=timeline_count)
        timeline_count += len(result.timeline_names)
        results.append(result)
    return ReadResult.combine(results)


def read_otio_file(otio_path: Path, first_index: int = 0) -> ReadResult:
    """Read every timeline found in one OTIO file.

    Raises:
        ValueError: If the file holds no timeline.
    """
    obj = otio.adapters.read_from_file(str(otio_path))
    return read_otio_object(obj, source_label=otio_path.name, first_index=first_index)


def read_otio_object(
    obj: Any,
    source_label: str = "<memory>",
    first_index: int = 0,
) -> ReadResult:
    """Read every timeline held by an already-loaded OTIO object.

    Args:
        obj: A timeline or a collection of timelines.
        source_label: Name used in error messages.
        first_index: Index given to the first timeline found; later ones count up.

    Raises:
        ValueError: If the object holds no timeline.
    """
    timelines = list(iter_timelines(obj))
    if not timelines:
        msg = f"No timeline found in {source_label}"
        raise ValueError(msg)

    return ReadResult.combine(
        read_timeline(timeline, timeline_index=first_index + offset)
        for offset, timeline in enumerate(timelines)
    )


def read_timeline(timeline: otio.schema.Timeline, timeline_index: int = 0) -> ReadResult:
    """Read the clip placements of a timeline's video tracks.

    Placement keys have the form ``"<index>:<timeline>/V<track>/<clip>"`` with
    a 1-based timeline index, so same-named timelines never share a key.
    """
    timeline_name = timeline.name or f"Timeline {timeline_index + 1}"
    logger.info("[reader] Processing timeline: %s", timeline_name)

    records: list[ClipRecord] = []
    clips: dict[str, otio.schema.Clip] = {}
    skipped: list[SkippedPlacement] = []
    global_start = timeline.global_start_time

    for track_index, track in enumerate(timeline.video_tracks(), start=1):
        clip_number = 0
        position = otio.opentime.RationalTime()
        for item in track:
            # Transitions overlap their neighbours and take no track time
            if isinstance(item, otio.schema.Transition):
                continue

            item_start = position
            position = position + _item_duration(item)

            if isinstance(item, otio.schema.Gap):
                continue

            clip_number += 1
            placement_key = f"{timeline_index + 1}:{timeline_name}/V{track_index}/{clip_number}"

            if not isinstance(item, otio.schema.Clip):
                skipped.append(_skip(placement_key, f"unsupported item {type(item).__name__}"))
                continue

            if global_start is not None:
                item_start = global_start + item_start

            record, reason = _extract_clip_record(item, track_index, placement_key, item_start)
            if record is None:
                skipped.append(_skip(placement_key, reason))
                continue

            if record.is_reversed:
                logger.info(
                    "[reader] Reversed clip %s: source frames %d to %d",
                    placement_key,
                    record.range_start,
                    record.range_end,
                )
            records.append(record)
            clips[placement_key] = item

    logger.info(
        "[reader] %s: %d placements read, %d skipped",
        timeline_name,
        len(records),
        len(skipped),
    )
    return ReadResult(
        records=records,
        clips=clips,
        skipped=skipped,
        timeline_names=[timeline_name],
    )


def _item_duration(item: otio.core.Item) -> otio.opentime.RationalTime:
    """Return an item's track duration, or zero when it has no usable range."""
    try:
        return item.duration()
    except otio.exceptions.OTIOError:
        return otio.opentime.RationalTime()


def _skip(placement_key: str, reason: str) -> SkippedPlacement:
    logger.warning("[reader] Skipping %s: %s", placement_key, reason)
    return SkippedPlacement(placement_key=placement_key, reason=reason)


def _extract_clip_record(
    clip: otio.schema.Clip,
    track_index: int,
    placement_key: str,
    position: otio.opentime.RationalTime,
) -> tuple[ClipRecord | None, str]:
    """Build a record from a clip, or return the reason it cannot be read."""
    media_ref = clip.media_reference
    file_path = _file_path(media_ref)

    source_id = _source_id(clip, file_path)
    if not source_id:
        return None, "no resolvable source media"

    try:
        source_range = clip.source_range or clip.available_range()
    except otio.exceptions.OTIOError:
        return None, "no retrievable frame range"

    rate = source_range.start_time.rate
    start_frame = source_range.start_time.to_frames()
    timeline_duration = source_range.duration.to_frames()
    if timeline_duration <= 0:
        return None, "empty frame range"

    time_scalar = _time_scalar(clip)
    consumed = max(1, round(timeline_duration * abs(time_scalar)))
    end_frame = start_frame + consumed - 1
    if time_scalar < 0 or _has_reverse_override(clip):
        start_frame, end_frame = end_frame, start_frame

    record = ClipRecord(
        source_id=source_id,
        source_name=_source_name(clip, file_path),
        reel_name=str(_find_metadata(clip.metadata, REEL_NAME_KEYS) or ""),
        file_path=file_path,
        range_start=start_frame,
        range_end=end_frame,
        timeline_inpoint=position.to_frames(rate),
        track_index=track_index,
        enabled=clip.enabled,
        frame_rate=rate,
        placement_key=placement_key,
        probe=_retime_probe(clip, timeline_duration, consumed),
    )
    return record, ""


def _file_path(media_ref: otio.core.MediaReference | None) -> str | None:
    if not isinstance(media_ref, otio.schema.ExternalReference):
        return None
    url = media_ref.target_url
    if not url:
        return None
    if url.startswith("file://"):
        return unquote(urlparse(url).path)
    return url


def _source_id(clip: otio.schema.Clip, file_path: str | None) -> str | None:
    builder_meta = clip.metadata.get(BUILDER_NAMESPACE)
    if _is_mapping(builder_meta) and builder_meta.get("source_id"):
        return str(builder_meta["source_id"])

    media_id = _find_metadata(clip.metadata, SOURCE_ID_KEYS)
    if media_id:
        return str(media_id)

    if file_path:
        return file_path

    media_ref = clip.media_reference
    if media_ref is not None and not media_ref.is_missing_reference and media_ref.name:
        return media_ref.name
    return None


def _has_reverse_override(clip: otio.schema.Clip) -> bool:
    builder_meta = clip.metadata.get(BUILDER_NAMESPACE)
    if not _is_mapping(builder_meta):
        return False
    return str(builder_meta.get("speed_override", "")).startswith("-")


def _source_name(clip: otio.schema.Clip, file_path: str | None) -> str:
    media_ref = clip.media_reference
    if media_ref is not None and media_ref.name:
        return media_ref.name
    if file_path:
        return Path(file_path).name
    return clip.name or ""


def _time_scalar(clip: otio.schema.Clip) -> float:
    scalar = 1.0
    for effect in clip.effects:
        if isinstance(effect, otio.schema.LinearTimeWarp):
            scalar *= effect.time_scalar
    return scalar


def _retime_probe(
    clip: otio.schema.Clip,
    timeline_duration: int,
    source_duration: int,
) -> RetimeProbe:
    speed: float | None = None
    attributes: dict[str, str] = {}

    warps = [e for e in clip.effects if isinstance(e, otio.schema.LinearTimeWarp)]
    if warps:
        speed = abs(_time_scalar(clip)) * 100
    else:
        speed = _parse_speed(_find_metadata(clip.metadata, SPEED_KEYS))

    for attribute in RETIME_ATTRIBUTES:
        value = _find_metadata(clip.metadata, (attribute,))
        if value is not None:
            attributes[attribute] = str(value)

    for effect in clip.effects:
        if isinstance(effect, otio.schema.TimeEffect) and not isinstance(
            effect, otio.schema.LinearTimeWarp
        ):
            attributes.setdefault("Retime Curve", effect.effect_name or effect.name or "TimeEffect")

    return RetimeProbe(
        timeline_duration=timeline_duration,
        source_duration=source_duration,
        speed=speed,
        attributes=attributes,
    )


def _parse_speed(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(str(value).strip().rstrip("%"))
    except ValueError:
        return None


def _is_mapping(value: Any) -> bool:
    return value is not None and not isinstance(value, str) and hasattr(value, "items")


def _find_metadata(metadata: Any, keys: Iterable[str]) -> Any:
    """Look a key up at top level, then one vendor namespace deep."""
    keys = tuple(keys)
    for key in keys:
        value = metadata.get(key)
        if value not in (None, "") and not _is_mapping(value):
            return value

    for namespace_value in metadata.values():
        if not _is_mapping(namespace_value):
            continue
        for key in keys:
            value = namespace_value.get(key)
            if value not in (None, "") and not _is_mapping(value):
                return value
    return None
