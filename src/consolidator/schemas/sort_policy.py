"""Output ordering policies."""

from enum import StrEnum, auto


class SortPolicy(StrEnum):
    """How the consolidated entries are ordered."""

    NONE = auto()
    SOURCE_INPOINT = auto()
    SOURCE_NAME = auto()
    TIMELINE_INPOINT = auto()
    REEL_NAME = auto()
