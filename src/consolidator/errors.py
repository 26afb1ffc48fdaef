"""Consolidator errors."""


class ConsolidationInvariantError(RuntimeError):
    """Raised when the consolidation pipeline is fed inconsistent data.

    This signals a defect upstream (a grouping bug or a malformed record)
    and must never be swallowed.
    """
