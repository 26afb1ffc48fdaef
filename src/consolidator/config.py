"""Consolidation settings loaded from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

from src.consolidator.schemas import (
    DEFAULT_CONNECTION_THRESHOLD,
    ConsolidationConfig,
    DuplicateMatchPolicy,
    SortPolicy,
)

# Load .env file from project root
_project_dir = Path(__file__).parent.parent.parent
load_dotenv(_project_dir / ".env")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"{name} must be a boolean, got {raw!r}"
    raise ValueError(msg)


def get_consolidation_config() -> ConsolidationConfig:
    """Get consolidation configuration from environment variables.

    Environment variables:
        MASTER_TIMELINE_CONNECTION_THRESHOLD: Max merge gap in frames (default: 25)
        MASTER_TIMELINE_INCLUDE_DISABLED: Keep disabled clips (default: false)
        MASTER_TIMELINE_SORT_POLICY: One of none, source_inpoint, source_name,
            timeline_inpoint, reel_name (default: source_name)
        MASTER_TIMELINE_MARK_DUPLICATES: Mark duplicate clips (default: true)
        MASTER_TIMELINE_DUPLICATE_POLICY: strict or loose (default: strict)
        MASTER_TIMELINE_MARK_RETIMED: Mark retimed clips (default: true)
        MASTER_TIMELINE_VIDEO_ONLY: Strip non-video tracks (default: true)
    """
    raw_threshold = os.environ.get(
        "MASTER_TIMELINE_CONNECTION_THRESHOLD", str(DEFAULT_CONNECTION_THRESHOLD)
    )
    try:
        threshold = int(raw_threshold)
    except ValueError:
        msg = f"MASTER_TIMELINE_CONNECTION_THRESHOLD must be an integer, got {raw_threshold!r}"
        raise ValueError(msg) from None

    sort_policy = os.environ.get("MASTER_TIMELINE_SORT_POLICY", SortPolicy.SOURCE_NAME)
    duplicate_policy = os.environ.get(
        "MASTER_TIMELINE_DUPLICATE_POLICY", DuplicateMatchPolicy.STRICT
    )

    return ConsolidationConfig(
        connection_threshold=threshold,
        include_disabled=_env_bool("MASTER_TIMELINE_INCLUDE_DISABLED", False),
        sort_policy=SortPolicy(sort_policy.strip().lower()),
        mark_duplicates=_env_bool("MASTER_TIMELINE_MARK_DUPLICATES", True),
        duplicate_policy=DuplicateMatchPolicy(duplicate_policy.strip().lower()),
        mark_retimed=_env_bool("MASTER_TIMELINE_MARK_RETIMED", True),
        video_only=_env_bool("MASTER_TIMELINE_VIDEO_ONLY", True),
    )
