"""
Data models shared by the packaging pipeline.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

BITRATE_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)([kKmM]?)")


def parse_bitrate_bps(token: str) -> int:
    """Convert "4200k" / "6M" / "800000" to bits per second."""
    match = BITRATE_RE.fullmatch(token.strip())
    if not match:
        raise ValueError(f"Bad bitrate '{token}'")
    value, unit = Decimal(match.group(1)), match.group(2).lower()
    if unit == "m":
        return int(value * 1_000_000)
    if unit == "k":
        return int(value * 1_000)
    return int(value)


@dataclass(frozen=True)
class SourceProbe:
    """Encode-relevant facts about the source, derived once per run."""
    frame_rate: float = 30.0
    frame_rate_rounded: int = 30
    rotation_degrees: int = 0
    field_order: str = ""
    interlaced: bool = False


@dataclass(frozen=True)
class RungSpec:
    """One validated ladder entry."""
    width: int
    height: int
    video_bitrate: str  # e.g. "3000k"
    buffer_size: str
    max_rate: str
    audio_bitrate_kbps: int

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def max_rate_bps(self) -> int:
        return parse_bitrate_bps(self.max_rate)

    @property
    def audio_bitrate_bps(self) -> int:
        return self.audio_bitrate_kbps * 1000

    @property
    def peak_bandwidth(self) -> int:
        return self.max_rate_bps + self.audio_bitrate_bps

    @property
    def average_bandwidth(self) -> int:
        return self.max_rate_bps * 9 // 10 + self.audio_bitrate_bps


@dataclass(frozen=True)
class FilterStage:
    name: str  # rotate, deinterlace, scale, pad, setsar, fps
    expression: str


@dataclass(frozen=True)
class FilterChain:
    """Ordered video filter stages for one rung."""
    stages: Tuple[FilterStage, ...]

    @property
    def names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def render(self) -> str:
        return ",".join(stage.expression for stage in self.stages)


@dataclass(frozen=True)
class EncodeJob:
    index: int
    rung: RungSpec
    filters: FilterChain
    gop: int


@dataclass(frozen=True)
class ManifestEntry:
    rung: RungSpec
    uri: str
    bandwidth: int
    average_bandwidth: int
    codecs: str
    frame_rate: int

    def to_lines(self) -> List[str]:
        return [
            f"#EXT-X-STREAM-INF:BANDWIDTH={self.bandwidth},"
            f"AVERAGE-BANDWIDTH={self.average_bandwidth},"
            f"RESOLUTION={self.rung.resolution},"
            f"CODECS=\"{self.codecs}\","
            f"FRAME-RATE={self.frame_rate}",
            self.uri,
        ]


@dataclass
class MasterManifest:
    version: int = 3
    entries: List[ManifestEntry] = field(default_factory=list)

    def render(self) -> str:
        lines = [
            "#EXTM3U",
            f"#EXT-X-VERSION:{self.version}",
            "#EXT-X-INDEPENDENT-SEGMENTS",
        ]
        for entry in self.entries:
            lines.extend(entry.to_lines())
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class SpriteRegion:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class Cue:
    """Maps [start, end) seconds to an image, or a region of a sprite sheet."""
    start: float
    end: float
    image: str
    region: Optional[SpriteRegion] = None

    @property
    def target(self) -> str:
        if self.region is None:
            return self.image
        r = self.region
        return f"{self.image}#xywh={r.x},{r.y},{r.width},{r.height}"


@dataclass
class ThumbnailTimeline:
    mode: str  # "images" or "sprites"
    images: List[Path] = field(default_factory=list)
    cues: List[Cue] = field(default_factory=list)
    vtt_path: Optional[Path] = None


@dataclass
class ThumbnailOutcome:
    """Result of the best-effort thumbnail step. Skipped is not an error."""
    timeline: Optional[ThumbnailTimeline] = None
    skipped: bool = False
    reason: Optional[str] = None

    @classmethod
    def skip(cls, reason: str) -> "ThumbnailOutcome":
        return cls(skipped=True, reason=reason)


@dataclass
class PackageResult:
    output_dir: Path
    master_path: Path
    manifest: MasterManifest
    probe: SourceProbe
    thumbnails: Optional[ThumbnailOutcome] = None
