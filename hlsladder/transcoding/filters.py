"""
Video filter chain construction for ladder rungs.

Every rung gets the same geometry and timing treatment so renditions are
interchangeable mid-stream: letterboxed into the exact rung size, square
pixels, constant frame rate.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..exceptions import RungValidationError
from ..models import FilterChain, FilterStage, RungSpec, SourceProbe
from .constants import DEINTERLACE_FILTER, PAD_COLOR, ROTATION_FILTERS

logger = logging.getLogger(__name__)

# ASCII only: str.isdigit and \d both accept other Unicode digits
DIMENSIONS_RE = re.compile(r"[0-9]+x[0-9]+")


def validate_dimensions(token: str, rung_index: Optional[int] = None) -> Tuple[int, int]:
    """Parse a "WxH" token, raising RungValidationError if it is malformed."""
    size = "".join(token.split())
    if not DIMENSIONS_RE.fullmatch(size):
        raise RungValidationError(f"Bad ladder size '{size}'", rung_index)

    width_str, height_str = size.split("x")
    width, height = int(width_str), int(height_str)
    if width <= 0 or height <= 0:
        raise RungValidationError(f"Bad WxH '{size}'", rung_index)
    return width, height


def rotation_filter(degrees: int) -> Optional[str]:
    """Filter expression that undoes display rotation, or None."""
    return ROTATION_FILTERS.get(degrees)


class FilterBuilder:
    """Builds the per-rung -vf chain."""

    def __init__(self, pad_color: str = PAD_COLOR):
        self.pad_color = pad_color

    def build(self, rung: RungSpec, probe: SourceProbe) -> FilterChain:
        w, h = rung.width, rung.height
        stages: List[FilterStage] = []

        # Source orientation and field structure are fixed before any resizing
        rotate = rotation_filter(probe.rotation_degrees)
        if rotate:
            stages.append(FilterStage("rotate", rotate))
        if probe.interlaced:
            stages.append(FilterStage("deinterlace", DEINTERLACE_FILTER))

        stages.extend([
            # Even dimensions for 4:2:0 chroma
            FilterStage(
                "scale",
                f"scale={w}:{h}:force_original_aspect_ratio=decrease:force_divisible_by=2",
            ),
            FilterStage("pad", f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2:color={self.pad_color}"),
            FilterStage("setsar", "setsar=1"),
            FilterStage("fps", f"fps={probe.frame_rate_rounded}"),
        ])

        chain = FilterChain(tuple(stages))
        logger.debug(f"[Filters] {rung.resolution}: {chain.render()}")
        return chain

