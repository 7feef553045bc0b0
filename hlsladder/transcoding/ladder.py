"""
Ladder loading and rung parsing.

Validation happens in two phases. load_ladder() only drops blank and
comment lines and refuses an empty ladder. parse_rung() checks the shape of
an entry and is called when that entry's encode job is built, so a bad line
late in the ladder aborts the run only once its turn comes.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from ..exceptions import LadderError, RungValidationError
from ..models import BITRATE_RE, RungSpec
from .constants import DEFAULT_LADDER
from .filters import validate_dimensions

logger = logging.getLogger(__name__)
RUNG_FIELDS = 5


def clean_ladder_lines(lines: Iterable[str]) -> List[str]:
    """Strip CR and whitespace; drop blank and '#' comment lines."""
    entries = []
    for raw in lines:
        line = raw.replace("\r", "").strip()
        if not line or line.startswith("#"):
            continue
        entries.append(line)
    return entries


def load_ladder(path: Optional[Path] = None) -> List[str]:
    """
    Load candidate rung tokens from a ladder file, or the default ladder.

    Raises:
        LadderError: the file cannot be read or holds no entries.
    """
    if path is None:
        entries = clean_ladder_lines(DEFAULT_LADDER)
        source = "built-in ladder"
    else:
        path = Path(path)
        try:
            # Undecodable bytes only matter on rung lines, which then fail parse_rung
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise LadderError(f"Cannot read ladder file {path}: {e}") from e
        entries = clean_ladder_lines(text.split("\n"))
        source = str(path)

    if not entries:
        raise LadderError(f"No ladder entries found in {source}.")

    logger.info(f"[Ladder] {len(entries)} rung(s) from {source}")
    return entries


def parse_rung(token: str, index: Optional[int] = None) -> RungSpec:
    """
    Parse one "WxH:vbit:buf:maxrate:audio_kbps" entry.

    Raises:
        RungValidationError: wrong field count, bad size, bitrate or audio value.
    """
    fields = token.split(":")
    if len(fields) != RUNG_FIELDS:
        raise RungValidationError(
            f"Bad ladder entry '{token}': expected WxH:vbit:buf:maxrate:audio_kbps",
            index,
        )

    size, video_bitrate, buffer_size, max_rate, audio = (f.strip() for f in fields)
    width, height = validate_dimensions(size, index)

    for name, value in (
        ("video bitrate", video_bitrate),
        ("buffer size", buffer_size),
        ("max rate", max_rate),
    ):
        if not BITRATE_RE.fullmatch(value):
            raise RungValidationError(f"Bad {name} '{value}' in '{token}'", index)

    if not re.fullmatch(r"[0-9]+", audio) or int(audio) <= 0:
        raise RungValidationError(f"Bad audio bitrate '{audio}' in '{token}'", index)

    return RungSpec(
        width=width,
        height=height,
        video_bitrate=video_bitrate,
        buffer_size=buffer_size,
        max_rate=max_rate,
        audio_bitrate_kbps=int(audio),
    )
