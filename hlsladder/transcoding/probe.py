"""
Source probing with ffprobe and interpretation of its JSON output.
"""

import json
import logging
from fractions import Fraction
from typing import Any, Dict, Optional, Tuple

from ..exceptions import ProbeError
from ..models import SourceProbe
from .constants import (
    DEFAULT_FRAME_RATE,
    DEFAULT_FRAME_RATE_ROUNDED,
    PROGRESSIVE_FIELD_ORDERS,
)
from .runner import FFmpegRunner

logger = logging.getLogger(__name__)


def first_video_stream(metadata: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    for stream in metadata.get("streams") or []:
        if stream.get("codec_type") == "video":
            return stream
    return None


def _usable_rate(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == "0/0":
        return None
    return value


def parse_frame_rate(stream: Dict[str, Any]) -> float:
    """Average rate, else nominal rate, else 30.0."""
    rate = _usable_rate(stream.get("avg_frame_rate")) or _usable_rate(stream.get("r_frame_rate"))
    if rate is None:
        return DEFAULT_FRAME_RATE
    try:
        return float(Fraction(rate))
    except (ValueError, ZeroDivisionError):
        return DEFAULT_FRAME_RATE


def round_frame_rate(rate: float) -> int:
    if rate <= 0:
        return DEFAULT_FRAME_RATE_ROUNDED
    return max(1, int(round(rate)))


def parse_rotation(stream: Dict[str, Any]) -> int:
    """Display rotation from side data, falling back to the legacy rotate tag."""
    candidates = [
        side.get("rotation")
        for side in stream.get("side_data_list") or []
        if isinstance(side, dict) and "rotation" in side
    ]
    candidates.append((stream.get("tags") or {}).get("rotate"))

    for value in candidates:
        if value is None or value == "":
            continue
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0
    return 0


def interpret_metadata(metadata: Dict[str, Any]) -> SourceProbe:
    """
    Turn ffprobe's -show_streams JSON into encode parameters.

    Raises:
        ProbeError: no video stream in the metadata.
    """
    stream = first_video_stream(metadata)
    if stream is None:
        raise ProbeError("No video stream found in source")

    frame_rate = parse_frame_rate(stream)
    field_order = str(stream.get("field_order") or "").strip()

    return SourceProbe(
        frame_rate=frame_rate,
        frame_rate_rounded=round_frame_rate(frame_rate),
        rotation_degrees=parse_rotation(stream),
        field_order=field_order,
        interlaced=field_order not in PROGRESSIVE_FIELD_ORDERS,
    )


class MediaProbe:
    """Runs ffprobe against sources and extracted frames."""

    def __init__(self, ffprobe_path: str = "ffprobe", runner: Optional[FFmpegRunner] = None):
        self.ffprobe_path = ffprobe_path
        self.runner = runner or FFmpegRunner()

    async def probe(self, source: str) -> Dict[str, Any]:
        cmd = [
            self.ffprobe_path, "-v", "error",
            "-print_format", "json",
            "-show_streams", "-show_format",
            source,
        ]
        result = await self.runner.run(cmd, label="ffprobe")
        if not result.ok:
            raise ProbeError(
                f"ffprobe failed for {source} (code {result.returncode}): "
                f"{result.stderr.strip()[-300:]}"
            )
        try:
            return json.loads(result.stdout.decode("utf-8", errors="ignore") or "{}")
        except json.JSONDecodeError as e:
            raise ProbeError(f"ffprobe returned invalid JSON for {source}: {e}") from e

    async def get_source_probe(self, source: str) -> SourceProbe:
        metadata = await self.probe(source)
        probe = interpret_metadata(metadata)
        logger.info(
            f"[Probe] fps={probe.frame_rate:.3f} (rounded {probe.frame_rate_rounded}), "
            f"rotation={probe.rotation_degrees}, interlaced={probe.interlaced}"
        )
        return probe

    async def probe_image_size(self, path: str) -> Optional[Tuple[int, int]]:
        """Width and height of an image or video file, or None if unknown."""
        cmd = [
            self.ffprobe_path, "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "csv=s=x:p=0",
            path,
        ]
        result = await self.runner.run(cmd, label="ffprobe")
        if not result.ok:
            return None
        text = result.stdout.decode("utf-8", errors="ignore").strip()
        parts = text.split("x")
        if len(parts) != 2:
            return None
        try:
            return int(parts[0]), int(parts[1])
        except ValueError:
            return None
