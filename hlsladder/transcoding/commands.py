"""
FFmpeg command building for rung encodes and thumbnail extraction.
"""

import logging
from pathlib import Path
from typing import List

from ..models import EncodeJob
from .context import RunContext

logger = logging.getLogger(__name__)


def ffmpeg_path_str(path: Path) -> str:
    """Use forward slashes for FFmpeg paths (works on all platforms)."""
    return str(path).replace("\\", "/")


class CommandBuilder:
    """Builds FFmpeg commands from a run context."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def _base(self) -> List[str]:
        return [self.ctx.ffmpeg_path, "-hide_banner", "-nostdin", "-y"]

    def build_encode_command(self, job: EncodeJob) -> List[str]:
        """Build the segmented HLS encode for one rung."""
        ctx = self.ctx
        tc = ctx.transcoding
        rung = job.rung

        cmd = self._base()
        cmd.extend(["-i", ctx.source])

        # First video and audio stream; drop container metadata and chapters
        cmd.extend([
            "-map", "0:v:0", "-map", "0:a:0",
            "-map_metadata", "-1", "-map_chapters", "-1",
        ])

        cmd.extend(["-vf", job.filters.render(), "-pix_fmt", tc.pixel_format])

        # Video: fixed GOP, no scene-cut keyframes, so every rung has
        # keyframes at the same timestamps
        cmd.extend([
            "-c:v", tc.video_encoder,
            "-profile:v", tc.profile,
            "-level", tc.level,
            "-x264-params", f"keyint={job.gop}:min-keyint={job.gop}:scenecut=0",
            "-b:v", rung.video_bitrate,
            "-maxrate", rung.max_rate,
            "-bufsize", rung.buffer_size,
            "-preset", tc.preset,
        ])

        cmd.extend([
            "-c:a", tc.audio_codec,
            "-b:a", f"{rung.audio_bitrate_kbps}k",
            "-ac", str(tc.audio_channels),
            "-ar", str(tc.audio_sample_rate),
        ])

        cmd.extend([
            "-f", "hls",
            "-hls_time", str(ctx.segment_duration),
            "-hls_playlist_type", "vod",
            "-hls_segment_filename", ffmpeg_path_str(ctx.segment_template(job.index)),
            "-hls_flags", "independent_segments",
            ffmpeg_path_str(ctx.playlist_path(job.index)),
        ])

        logger.debug(f"[Command] Rung {job.index}: {' '.join(cmd)}")
        return cmd

    def thumbnail_filter(self) -> str:
        thumbs = self.ctx.thumbnails
        return f"fps=1/{thumbs.interval},scale={thumbs.width}:-2"

    def build_frame_extract_command(self, output_pattern: Path) -> List[str]:
        """One frame every thumbnail interval, scaled to the thumbnail width."""
        cmd = self._base()
        cmd.extend([
            "-i", self.ctx.source,
            "-vf", self.thumbnail_filter(),
            ffmpeg_path_str(output_pattern),
        ])
        return cmd

    def build_sprite_command(self, list_path: Path, sheet_path: Path) -> List[str]:
        """Tile the frames named in a concat list into one sprite sheet."""
        thumbs = self.ctx.thumbnails
        cmd = self._base()
        cmd.extend([
            "-f", "concat", "-safe", "0",
            "-i", ffmpeg_path_str(list_path),
            "-filter_complex", f"tile={thumbs.sprite_cols}x{thumbs.sprite_rows}",
            "-frames:v", "1",
            ffmpeg_path_str(sheet_path),
        ])
        return cmd
