"""Timeline consolidation routes."""

import logging

import opentimelineio as otio
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from src.api.schemas.requests import ConsolidateOptions
from src.api.schemas.responses import ConsolidateResponse
from src.consolidator.config import get_consolidation_config
from src.consolidator.providers import consolidator_service
from src.consolidator.schemas import (
    ConsolidationConfig,
    DuplicateMatchPolicy,
    SortPolicy,
)
from src.pipeline.master_timeline_runner import MasterTimelineRunner
from src.timeline_reader.read_otio import ReadResult, read_otio_object

logger = logging.getLogger(__name__)

router = APIRouter()


def _consolidation_config(
    connection_threshold: int | None = Query(default=None, ge=0),
    include_disabled: bool | None = None,
    sort_policy: SortPolicy | None = None,
    mark_duplicates: bool | None = None,
    duplicate_policy: DuplicateMatchPolicy | None = None,
    mark_retimed: bool | None = None,
    video_only: bool | None = None,
) -> ConsolidationConfig:
    """Merge query overrides onto the environment configuration."""
    options = ConsolidateOptions(
        connection_threshold=connection_threshold,
        include_disabled=include_disabled,
        sort_policy=sort_policy,
        mark_duplicates=mark_duplicates,
        duplicate_policy=duplicate_policy,
        mark_retimed=mark_retimed,
        video_only=video_only,
    )
    try:
        base = get_consolidation_config()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return ConsolidationConfig(**{**base.model_dump(), **options.overrides()})


async def _load_uploads(files: list[UploadFile]) -> ReadResult:
    """Parse uploaded OTIO files and read their placements.

    Timelines are numbered across all uploads so placement keys stay unique.
    """
    results: list[ReadResult] = []
    timeline_count = 0

    for upload_file in files:
        filename = upload_file.filename or "upload.otio"
        content = await upload_file.read()
        try:
            obj = otio.adapters.read_from_string(content.decode("utf-8"))
            result = read_otio_object(obj, source_label=filename, first_index=timeline_count)
        except (otio.exceptions.OTIOError, ValueError) as e:
            logger.warning("[api] Rejecting %s: %s", filename, e)
            raise HTTPException(status_code=400, detail=f"Invalid OTIO file {filename}: {e}") from e
        timeline_count += len(result.timeline_names)
        results.append(result)

    return ReadResult.combine(results)


@router.post("/consolidate", response_model=ConsolidateResponse)
async def consolidate_timelines(
    files: list[UploadFile] = File(...),
    config: ConsolidationConfig = Depends(_consolidation_config),
) -> ConsolidateResponse:
    """Consolidate the clips of uploaded timelines into an ordered plan."""
    read = await _load_uploads(files)
    plan = consolidator_service().consolidate(
        read.records,
        config,
        skipped_count=read.skipped_count,
    )
    return ConsolidateResponse(
        timeline_names=read.timeline_names,
        plan=plan,
        skipped=read.skipped,
    )


@router.post("/master")
async def build_master_timeline(
    name: str = Query(min_length=1, max_length=100),
    files: list[UploadFile] = File(...),
    config: ConsolidationConfig = Depends(_consolidation_config),
) -> StreamingResponse:
    """Build the master timeline of uploaded timelines and return it as OTIO."""
    read = await _load_uploads(files)
    report = MasterTimelineRunner(config).run(read, name)
    logger.info("[api] Built master timeline: %s", report.summary())

    content = otio.adapters.write_to_string(report.timeline).encode("utf-8")
    return StreamingResponse(
        iter([content]),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{name}.otio"'},
    )
