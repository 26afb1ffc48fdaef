"""Command line entry point for master timeline tools."""

import argparse
import json
import logging
import sys
from pathlib import Path

import opentimelineio as otio
from pydantic import ValidationError

from src.consolidator.config import get_consolidation_config
from src.consolidator.schemas import (
    ConsolidationConfig,
    DuplicateMatchPolicy,
    SortPolicy,
)
from src.pipeline.master_timeline_runner import (
    MasterTimelineRunner,
    mark_duplicates_in_file,
    strip_audio_in_file,
)
from src.shot_numbering.providers import shot_numbering_service
from src.shot_numbering.service import ShotNumberingConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="master-timeline",
        description="Consolidate clips from edit timelines into a master timeline.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log merge details")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build a master timeline from OTIO files")
    build.add_argument("inputs", nargs="+", type=Path, help="Source .otio files")
    build.add_argument("--name", required=True, help="Name of the new timeline")
    build.add_argument("--output", type=Path, required=True, help="Where to write the .otio")
    build.add_argument("--threshold", type=int, help="Connection threshold in frames")
    build.add_argument("--sort", choices=[p.value for p in SortPolicy], help="Sort policy")
    build.add_argument("--duplicate-policy", choices=[p.value for p in DuplicateMatchPolicy])
    build.add_argument("--include-disabled", action="store_true", default=None)
    build.add_argument("--keep-audio", action="store_true", help="Keep non-video tracks")
    build.add_argument("--no-duplicates", action="store_true", help="Skip duplicate markers")
    build.add_argument("--no-retimed", action="store_true", help="Skip retime markers")

    dup = sub.add_parser("mark-duplicates", help="Mark duplicate clips on a timeline")
    dup.add_argument("input", type=Path)
    dup.add_argument("--output", type=Path)
    dup.add_argument(
        "--policy",
        choices=[p.value for p in DuplicateMatchPolicy],
        default=DuplicateMatchPolicy.LOOSE.value,
    )

    shots = sub.add_parser("shot-numbers", help="Assign shot numbers along a timeline")
    shots.add_argument("input", type=Path)
    shots.add_argument("--output", type=Path)
    shots.add_argument("--padding", type=int, default=4)
    shots.add_argument("--increment", type=int, default=10)
    shots.add_argument("--clear-existing", action="store_true")

    strip = sub.add_parser("strip-audio", help="Remove non-video tracks from a timeline")
    strip.add_argument("input", type=Path)
    strip.add_argument("--output", type=Path)

    return parser


def _run_build(args: argparse.Namespace) -> int:
    config = get_consolidation_config()
    overrides: dict[str, object] = {}
    if args.threshold is not None:
        overrides["connection_threshold"] = args.threshold
    if args.sort:
        overrides["sort_policy"] = SortPolicy(args.sort)
    if args.duplicate_policy:
        overrides["duplicate_policy"] = DuplicateMatchPolicy(args.duplicate_policy)
    if args.include_disabled:
        overrides["include_disabled"] = True
    if args.keep_audio:
        overrides["video_only"] = False
    if args.no_duplicates:
        overrides["mark_duplicates"] = False
    if args.no_retimed:
        overrides["mark_retimed"] = False
    config = ConsolidationConfig(**{**config.model_dump(), **overrides})

    missing = [p for p in args.inputs if not p.exists()]
    if missing:
        print(f"File not found: {', '.join(str(p) for p in missing)}")
        return 1

    report = MasterTimelineRunner(config).run_files(args.inputs, args.name, args.output)
    print(json.dumps(report.summary(), indent=2))
    return 0


def _run_shot_numbers(args: argparse.Namespace) -> int:
    config = ShotNumberingConfig(
        padding=args.padding,
        increment=args.increment,
        clear_existing=args.clear_existing,
    )
    obj = otio.adapters.read_from_file(str(args.input))
    if not isinstance(obj, otio.schema.Timeline):
        print(f"{args.input} does not hold a single timeline")
        return 1
    report = shot_numbering_service().apply(obj, config)
    otio.adapters.write_to_file(obj, str(args.output or args.input))
    print(json.dumps(report.model_dump(), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        if args.command == "build":
            return _run_build(args)
        if args.command == "mark-duplicates":
            report = mark_duplicates_in_file(
                args.input,
                args.output,
                policy=DuplicateMatchPolicy(args.policy),
            )
            print(f"Added {report.succeeded} markers out of {report.attempted} attempts")
            return 0
        if args.command == "shot-numbers":
            return _run_shot_numbers(args)
        if args.command == "strip-audio":
            removed = strip_audio_in_file(args.input, args.output)
            print(f"Removed {removed} tracks")
            return 0
    except (ValidationError, ValueError, otio.exceptions.OTIOError) as e:
        logger.error("%s", e)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
