import opentimelineio as otio
import pytest

from src.consolidator.retime import annotate_retime
from src.timeline_reader import (
    ReadResult,
    iter_timelines,
    read_otio_file,
    read_otio_files,
    read_otio_object,
    read_timeline,
)

from tests.conftest import make_clip, make_gap, make_timeline


def test_reads_video_placements_in_order():
    tl = make_timeline(
        "Edit",
        [
            [make_clip("/media/a.mov", 100, 24), make_gap(10), make_clip("/media/b.mov", 0, 12)],
            [make_clip("/media/a.mov", 500, 6)],
        ],
    )

    result = read_timeline(tl)

    assert [r.placement_key for r in result.records] == ["1:Edit/V1/1", "1:Edit/V1/2", "1:Edit/V2/1"]
    first, second, third = result.records
    assert (first.source_id, first.range_start, first.range_end) == ("/media/a.mov", 100, 123)
    assert first.source_name == "a.mov"
    assert second.timeline_inpoint == 34
    assert third.track_index == 2
    assert set(result.clips) == {"1:Edit/V1/1", "1:Edit/V1/2", "1:Edit/V2/1"}
    assert result.timeline_names == ["Edit"]


def test_audio_tracks_are_ignored():
    tl = make_timeline(
        "Edit",
        [[make_clip("/media/a.mov", 0, 10)]],
        audio_tracks=[[make_clip("/media/a.wav", 0, 10)]],
    )

    result = read_timeline(tl)

    assert [r.source_id for r in result.records] == ["/media/a.mov"]


def test_global_start_offsets_inpoint():
    tl = make_timeline("Edit", [[make_gap(48), make_clip("/media/a.mov", 0, 10)]])
    tl.global_start_time = otio.opentime.RationalTime(86400, 24)

    result = read_timeline(tl)

    assert result.records[0].timeline_inpoint == 86448


def test_negative_time_warp_reads_as_reversed():
    reversed_clip = make_clip(
        "/media/a.mov",
        400,
        101,
        effects=[otio.schema.LinearTimeWarp(time_scalar=-1.0)],
    )

    record = read_timeline(make_timeline("Edit", [[reversed_clip]])).records[0]

    assert record.is_reversed
    assert (record.range_start, record.range_end) == (500, 400)
    assert (record.normalized_start, record.normalized_end) == (400, 500)
    assert record.probe.speed == pytest.approx(100.0)


def test_speed_warp_feeds_retime_probe():
    fast_clip = make_clip(
        "/media/a.mov",
        0,
        48,
        effects=[otio.schema.LinearTimeWarp(time_scalar=2.0)],
    )

    record = read_timeline(make_timeline("Edit", [[fast_clip]])).records[0]

    assert record.range_end == 95
    assert record.probe.timeline_duration == 48
    assert record.probe.source_duration == 96
    assert record.probe.speed == pytest.approx(200.0)
    assert annotate_retime(record).is_retimed


def test_metadata_speed_and_retime_attributes():
    metadata = {"Resolve": {"Speed": "75%", "Retime Process": "Optical Flow"}}
    record = read_timeline(
        make_timeline("Edit", [[make_clip("/media/a.mov", 0, 10, metadata=metadata)]])
    ).records[0]

    assert record.probe.speed == pytest.approx(75.0)
    assert record.probe.attributes == {"Retime Process": "Optical Flow"}


def test_reel_name_from_namespaced_metadata():
    metadata = {"cmx_3600": {"reel": "A001"}}
    record = read_timeline(
        make_timeline("Edit", [[make_clip("/media/a.mov", 0, 10, metadata=metadata)]])
    ).records[0]

    assert record.reel_name == "A001"


def test_media_id_takes_precedence_over_path():
    metadata = {"Resolve": {"media_id": "1234-abcd"}}
    record = read_timeline(
        make_timeline("Edit", [[make_clip("/media/a.mov", 0, 10, metadata=metadata)]])
    ).records[0]

    assert record.source_id == "1234-abcd"
    assert record.file_path == "/media/a.mov"


def test_file_url_is_unquoted():
    record = read_timeline(
        make_timeline("Edit", [[make_clip("file:///media/My%20Clip.mov", 0, 10)]])
    ).records[0]

    assert record.file_path == "/media/My Clip.mov"
    assert record.source_name == "My Clip.mov"


def test_disabled_clip_is_read_with_flag():
    disabled = make_clip("/media/a.mov", 0, 10)
    disabled.enabled = False

    record = read_timeline(make_timeline("Edit", [[disabled]])).records[0]

    assert not record.enabled


def test_unresolvable_placements_are_skipped():
    no_range = otio.schema.Clip(
        name="no range",
        media_reference=otio.schema.ExternalReference(target_url="/media/b.mov"),
    )
    tl = make_timeline(
        "Edit",
        [[make_clip(None, 0, 10), no_range, make_clip("/media/a.mov", 0, 10)]],
    )

    result = read_timeline(tl)

    assert [r.placement_key for r in result.records] == ["1:Edit/V1/3"]
    assert [(s.placement_key, s.reason) for s in result.skipped] == [
        ("1:Edit/V1/1", "no resolvable source media"),
        ("1:Edit/V1/2", "no retrievable frame range"),
    ]
    assert result.skipped_count == 2
    # The rangeless clip takes no track time, the missing-media one does
    assert result.records[0].timeline_inpoint == 10


def test_unnamed_timeline_gets_positional_name():
    tl = make_timeline("", [[make_clip("/media/a.mov", 0, 10)]])

    result = read_timeline(tl, timeline_index=2)

    assert result.timeline_names == ["Timeline 3"]
    assert result.records[0].placement_key == "3:Timeline 3/V1/1"


def test_collection_yields_every_timeline():
    first = make_timeline("One", [[make_clip("/media/a.mov", 0, 10)]])
    second = make_timeline("Two", [[make_clip("/media/b.mov", 0, 10)]])
    nested = otio.schema.SerializableCollection(name="bin", children=[second])
    collection = otio.schema.SerializableCollection(name="root", children=[first, nested])

    assert [t.name for t in iter_timelines(collection)] == ["One", "Two"]

    result = read_otio_object(collection)
    assert result.timeline_names == ["One", "Two"]
    assert len(result.records) == 2


def test_object_without_timeline_is_rejected():
    with pytest.raises(ValueError):
        read_otio_object(otio.schema.SerializableCollection(name="empty"))


def test_reads_files_from_disk(tmp_path):
    paths = []
    for name, media in (("One", "/media/a.mov"), ("Two", "/media/b.mov")):
        path = tmp_path / f"{name}.otio"
        otio.adapters.write_to_file(make_timeline(name, [[make_clip(media, 0, 10)]]), str(path))
        paths.append(path)

    single = read_otio_file(paths[0])
    combined = read_otio_files(paths)

    assert single.timeline_names == ["One"]
    assert combined.timeline_names == ["One", "Two"]
    assert [r.source_id for r in combined.records] == ["/media/a.mov", "/media/b.mov"]


def test_clips_after_a_rangeless_clip_stay_readable():
    no_range = otio.schema.Clip(
        name="no range",
        media_reference=otio.schema.ExternalReference(target_url="/media/b.mov"),
    )
    tl = make_timeline(
        "Edit",
        [[make_clip("/media/a.mov", 0, 24), no_range, make_gap(6), make_clip("/media/c.mov", 0, 10)]],
    )

    result = read_timeline(tl)

    assert [(r.source_id, r.timeline_inpoint) for r in result.records] == [
        ("/media/a.mov", 0),
        ("/media/c.mov", 30),
    ]
    assert result.skipped_count == 1


def test_same_named_timelines_get_distinct_keys():
    first = make_timeline("Edit", [[make_clip("/media/a.mov", 0, 48)]])
    second = make_timeline("Edit", [[make_gap(48), make_clip("/media/a.mov", 0, 48)]])
    collection = otio.schema.SerializableCollection(name="bin", children=[first, second])

    result = read_otio_object(collection)

    assert [r.placement_key for r in result.records] == ["1:Edit/V1/1", "2:Edit/V1/1"]
    assert len(result.clips) == 2


def test_timeline_numbering_continues_across_files(tmp_path):
    paths = []
    for index in range(2):
        path = tmp_path / f"edit_{index}.otio"
        otio.adapters.write_to_file(make_timeline("Edit", [[make_clip("/media/a.mov", 0, 10)]]), str(path))
        paths.append(path)

    result = read_otio_files(paths)

    assert [r.placement_key for r in result.records] == ["1:Edit/V1/1", "2:Edit/V1/1"]
    assert result.timeline_names == ["Edit", "Edit"]


def test_combining_results_with_shared_keys_is_rejected():
    tl = make_timeline("Edit", [[make_clip("/media/a.mov", 0, 10)]])

    with pytest.raises(ValueError):
        ReadResult.combine([read_timeline(tl), read_timeline(tl)])


def test_skipped_placement_is_a_frozen_schema():
    result = read_timeline(make_timeline("Edit", [[make_clip(None, 0, 10)]]))

    assert result.skipped[0].model_dump() == {
        "placement_key": "1:Edit/V1/1",
        "reason": "no resolvable source media",
    }
    with pytest.raises(ValueError):
        result.skipped[0].reason = "changed"
