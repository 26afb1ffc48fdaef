"""FastAPI application entry point."""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI

from src.api.routes import timelines

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = FastAPI(
    title="Master Timeline API",
    description="Consolidate clips from edit timelines into a master timeline",
    version="0.1.0",
)

app.include_router(timelines.router, prefix="/api/timelines", tags=["timelines"])


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
