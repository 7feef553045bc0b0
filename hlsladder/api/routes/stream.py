"""
Packaged file routes
"""

from pathlib import Path
from typing import Dict, Tuple

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

PLAYLIST_CACHE = "public,max-age=300"
IMMUTABLE_CACHE = "public,max-age=31536000,immutable"

# suffix -> (content type, cache control)
CONTENT_TYPES: Dict[str, Tuple[str, str]] = {
    ".m3u8": ("application/vnd.apple.mpegurl", PLAYLIST_CACHE),
    ".ts": ("video/mp2t", IMMUTABLE_CACHE),
    ".vtt": ("text/vtt", PLAYLIST_CACHE),
    ".webp": ("image/webp", IMMUTABLE_CACHE),
    ".jpg": ("image/jpeg", IMMUTABLE_CACHE),
    ".png": ("image/png", IMMUTABLE_CACHE),
}

router = APIRouter()


def content_headers(filename: str) -> Tuple[str, str]:
    """Content type and cache control for a packaged file name."""
    return CONTENT_TYPES.get(
        Path(filename).suffix.lower(),
        ("application/octet-stream", PLAYLIST_CACHE),
    )


def resolve_within(root: Path, filename: str) -> Path:
    """Resolve filename under root; anything outside root is not found."""
    file_path = (root / filename).resolve()
    if file_path != root and root not in file_path.parents:
        raise HTTPException(status_code=404, detail="File not found")
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return file_path


@router.get("/hls/{filename:path}")
async def serve_file(filename: str, request: Request):
    """Serve playlists, segments and thumbnails."""
    root: Path = request.app.state.hls_root
    file_path = resolve_within(root, filename)
    media_type, cache_control = content_headers(file_path.name)

    return FileResponse(
        file_path,
        media_type=media_type,
        headers={"Accept-Ranges": "bytes", "Cache-Control": cache_control},
    )
