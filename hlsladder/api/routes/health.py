"""
Health route
"""

import time

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ... import __version__
from ...transcoding.constants import MASTER_PLAYLIST_NAME

router = APIRouter()

start_time: float = time.time()


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    master_available: bool


@router.get("/api/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    root = request.app.state.hls_root
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - start_time,
        master_available=(root / MASTER_PLAYLIST_NAME).is_file(),
    )
