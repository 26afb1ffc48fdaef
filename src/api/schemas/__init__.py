"""API schemas for requests and responses."""

from src.api.schemas.requests import ConsolidateOptions
from src.api.schemas.responses import ConsolidateResponse

__all__ = [
    "ConsolidateOptions",
    "ConsolidateResponse",
]
