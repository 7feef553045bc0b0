"""
Per-run context shared by every pipeline component.
"""

from dataclasses import dataclass
from pathlib import Path

from ..config import ThumbnailConfig, TranscodingConfig
from ..models import SourceProbe
from .constants import (
    MASTER_PLAYLIST_NAME,
    RUNG_PLAYLIST_TEMPLATE,
    RUNG_SEGMENT_TEMPLATE,
    THUMBS_DIR_NAME,
    THUMBS_SCRATCH_DIR_NAME,
)


@dataclass(frozen=True)
class RunContext:
    """
    Immutable parameters of one packaging run.

    Built once after probing and handed to every component, so nothing in
    the pipeline reads process-wide state. The config sections are private
    copies taken when the context is created.
    """
    source: str
    output_dir: Path
    probe: SourceProbe
    transcoding: TranscodingConfig
    thumbnails: ThumbnailConfig
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    @property
    def segment_duration(self) -> int:
        return self.transcoding.segment_duration

    @property
    def parallel(self) -> int:
        return self.transcoding.parallel

    @property
    def gop(self) -> int:
        """Keyframe interval in frames: one keyframe per segment boundary."""
        return self.segment_duration * self.probe.frame_rate_rounded

    @property
    def master_path(self) -> Path:
        return self.output_dir / MASTER_PLAYLIST_NAME

    @property
    def thumbs_dir(self) -> Path:
        return self.output_dir / THUMBS_DIR_NAME

    @property
    def thumbs_scratch_dir(self) -> Path:
        return self.output_dir / THUMBS_SCRATCH_DIR_NAME

    def playlist_name(self, index: int) -> str:
        return RUNG_PLAYLIST_TEMPLATE.format(index=index)

    def playlist_path(self, index: int) -> Path:
        return self.output_dir / self.playlist_name(index)

    def segment_template(self, index: int) -> Path:
        return self.output_dir / RUNG_SEGMENT_TEMPLATE.format(index=index)
