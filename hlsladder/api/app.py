"""
FastAPI application serving a packaged output directory.

Headers follow the distribution mapping: playlists get a short cache
lifetime so a re-packaged title is picked up, segments and images are
immutable.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .routes import health, stream

logger = logging.getLogger(__name__)


def create_app(root: Union[str, Path]) -> FastAPI:
    """Create an app serving `root` under /hls/."""
    root = Path(root).resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"hlsladder v{__version__} serving {root}")
        yield

    app = FastAPI(
        title="hlsladder",
        description="Preview origin for HLS ladder output",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.hls_root = root

    # hls.js players on other origins fetch playlists with XHR
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "HEAD"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(stream.router)
    return app
