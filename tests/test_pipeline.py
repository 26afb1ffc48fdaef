import opentimelineio as otio
import pytest

from src.consolidator.schemas import ConsolidationConfig
from src.marker_painter.service import DUPLICATE_NOTE, marker_note
from src.pipeline.master_timeline_runner import (
    MasterTimelineRunner,
    mark_duplicates_in_file,
    strip_audio_in_file,
)

from tests.conftest import make_clip, make_gap, make_timeline


@pytest.fixture
def source_files(tmp_path):
    first = make_timeline(
        "Reel 1",
        [[make_clip("/media/a.mov", 100, 50), make_clip("/media/b.mov", 0, 10)]],
        audio_tracks=[[make_clip("/media/a.wav", 0, 60)]],
    )
    second = make_timeline(
        "Reel 2",
        [
            [
                make_clip("/media/a.mov", 160, 20),
                make_clip(
                    "/media/c.mov",
                    0,
                    48,
                    effects=[otio.schema.LinearTimeWarp(time_scalar=2.0)],
                ),
                make_gap(12),
                make_clip("/media/a.mov", 1000, 10),
            ]
        ],
    )
    paths = []
    for tl in (first, second):
        path = tmp_path / f"{tl.name}.otio"
        otio.adapters.write_to_file(tl, str(path))
        paths.append(path)
    return paths


def test_run_files_builds_marked_master_timeline(source_files, tmp_path):
    output = tmp_path / "master.otio"

    report = MasterTimelineRunner().run_files(source_files, "Master", output)

    entries = [(e.source_name, e.range_start, e.range_end) for e in report.plan.entries]
    assert entries == [
        ("a.mov", 100, 179),
        ("a.mov", 1000, 1009),
        ("b.mov", 0, 9),
        ("c.mov", 0, 95),
    ]
    summary = report.summary()
    assert summary["input_placements"] == 5
    assert summary["appended"] == 4
    assert summary["duplicate_sets"] == 1
    assert summary["duplicate_markers"] == 2
    assert summary["retimed_entries"] == 1
    assert summary["retime_markers"] == 1
    assert summary["output_path"] == str(output)

    written = otio.adapters.read_from_file(str(output))
    assert written.name == "Master"
    assert [t.kind for t in written.tracks] == [otio.schema.TrackKind.Video]
    clips = list(written.video_tracks()[0].find_clips())
    assert [len(c.markers) for c in clips] == [1, 1, 0, 1]
    assert clips[0].markers[0].name == "Dup Set #1 (1/2)"
    assert clips[3].markers[0].name == "Retimed Clip"


def test_marking_can_be_turned_off(source_files):
    config = ConsolidationConfig(mark_duplicates=False, mark_retimed=False, video_only=False)

    report = MasterTimelineRunner(config).run_files(source_files, "Master")

    clips = list(report.timeline.video_tracks()[0].find_clips())
    assert all(len(c.markers) == 0 for c in clips)
    assert len(report.timeline.audio_tracks()) == 1
    assert report.output_path is None


def test_empty_input_builds_empty_timeline(tmp_path):
    path = tmp_path / "empty.otio"
    otio.adapters.write_to_file(make_timeline("Empty", [[make_gap(10)]]), str(path))

    report = MasterTimelineRunner().run_files([path], "Master")

    assert report.plan.entries == []
    assert report.appended == 0


def test_mark_duplicates_in_file_uses_loose_matching(tmp_path):
    tl = make_timeline(
        "Edit",
        [[
            make_clip("/media/a.mov", 0, 40),
            make_clip("/media/b.mov", 0, 40),
            make_clip("/media/a.mov", 500, 40),
        ]],
    )
    path = tmp_path / "edit.otio"
    output = tmp_path / "marked.otio"
    otio.adapters.write_to_file(tl, str(path))

    report = mark_duplicates_in_file(path, output)

    assert report.succeeded == 2
    clips = list(otio.adapters.read_from_file(str(output)).video_tracks()[0].find_clips())
    assert [len(c.markers) for c in clips] == [1, 0, 1]
    assert marker_note(clips[2].markers[0]) == DUPLICATE_NOTE
    assert clips[2].markers[0].marked_range.start_time.to_frames() == 510


def test_strip_audio_in_file_rewrites_in_place(tmp_path):
    tl = make_timeline(
        "Edit",
        [[make_clip("/media/a.mov", 0, 10)]],
        audio_tracks=[[make_clip("/media/a.wav", 0, 10)]],
    )
    path = tmp_path / "edit.otio"
    otio.adapters.write_to_file(tl, str(path))

    removed = strip_audio_in_file(path)

    assert removed == 1
    assert len(otio.adapters.read_from_file(str(path)).tracks) == 1


def test_duplicates_across_same_named_timelines_mark_each_clip(tmp_path):
    first = make_timeline("Edit", [[make_clip("/media/a.mov", 0, 48)]])
    second = make_timeline("Edit", [[make_gap(48), make_clip("/media/a.mov", 0, 48)]])
    path = tmp_path / "bin.otio"
    otio.adapters.write_to_file(
        otio.schema.SerializableCollection(name="bin", children=[first, second]),
        str(path),
    )

    report = mark_duplicates_in_file(path)

    assert report.succeeded == 2
    timelines = list(otio.adapters.read_from_file(str(path)))
    marker_counts = [len(c.markers) for tl in timelines for c in tl.find_clips()]
    assert marker_counts == [1, 1]


def test_run_files_with_same_named_timelines(tmp_path):
    paths = []
    for index in range(2):
        path = tmp_path / f"edit_{index}.otio"
        otio.adapters.write_to_file(
            make_timeline("Edit", [[make_clip("/media/a.mov", index * 500, 10)]]),
            str(path),
        )
        paths.append(path)

    report = MasterTimelineRunner().run_files(paths, "Master")

    assert report.plan.input_count == 2
    assert len(report.plan.entries) == 2
    assert report.duplicate_markers.succeeded == 2
