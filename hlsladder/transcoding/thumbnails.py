"""
Scrubbing thumbnails: per-interval images or sprite sheets plus a WebVTT
cue track.

The whole step is best effort. generate() never raises; any failure is
logged and reported as a skipped outcome, and the packaging run carries on.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..models import Cue, SpriteRegion, ThumbnailOutcome, ThumbnailTimeline
from .commands import CommandBuilder
from .constants import (
    DEFAULT_THUMB_HEIGHT,
    SPRITE_FRAME_TEMPLATE,
    SPRITE_SHEET_TEMPLATE,
    THUMB_IMAGE_TEMPLATE,
    THUMBS_VTT_NAME,
)
from .context import RunContext
from .error_classifier import get_error_classifier
from .probe import MediaProbe
from .runner import FFmpegRunner

logger = logging.getLogger(__name__)


class ThumbnailStepFailed(Exception):
    """Internal signal; converted to a skipped outcome by generate()."""


def format_timestamp(seconds: float) -> str:
    """WebVTT timestamp, HH:MM:SS.mmm."""
    total_ms = int(round(seconds * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{ms:03d}"


def image_cues(count: int, interval: int, fmt: str) -> List[Cue]:
    """Cue k covers [k*interval, (k+1)*interval) and shows image k+1."""
    return [
        Cue(
            start=k * interval,
            end=(k + 1) * interval,
            image=THUMB_IMAGE_TEMPLATE.format(index=k + 1, fmt=fmt),
        )
        for k in range(count)
    ]


def sprite_region(frame_index: int, cols: int, rows: int, width: int, height: int):
    """
    Sheet number and pixel region of a 1-based frame index.

    Returns:
        Tuple of (sheet_index, SpriteRegion).
    """
    per_sheet = cols * rows
    sheet_index = (frame_index - 1) // per_sheet
    position = (frame_index - 1) % per_sheet
    col, row = position % cols, position // cols
    return sheet_index, SpriteRegion(x=col * width, y=row * height, width=width, height=height)


def sprite_cues(
    count: int,
    interval: int,
    cols: int,
    rows: int,
    width: int,
    height: int,
    fmt: str,
) -> List[Cue]:
    cues = []
    for frame_index in range(1, count + 1):
        sheet_index, region = sprite_region(frame_index, cols, rows, width, height)
        start = (frame_index - 1) * interval
        cues.append(Cue(
            start=start,
            end=start + interval,
            image=SPRITE_SHEET_TEMPLATE.format(index=sheet_index, fmt=fmt),
            region=region,
        ))
    return cues


def render_webvtt(cues: List[Cue]) -> str:
    lines = ["WEBVTT"]
    for cue in cues:
        lines.append("")
        lines.append(f"{format_timestamp(cue.start)} --> {format_timestamp(cue.end)}")
        lines.append(cue.target)
    return "\n".join(lines) + "\n"


def count_sequential(directory: Path, template: str, **fields) -> int:
    """Number of files template(1), template(2), ... present without a gap."""
    n = 0
    while (directory / template.format(index=n + 1, **fields)).is_file():
        n += 1
    return n


def _concat_line(path: Path) -> str:
    escaped = str(path.resolve()).replace("\\", "/").replace("'", "'\\''")
    return f"file '{escaped}'\n"


class ThumbnailGenerator:
    """Extracts timeline thumbnails for one run."""

    def __init__(
        self,
        ctx: RunContext,
        runner: Optional[FFmpegRunner] = None,
        probe: Optional[MediaProbe] = None,
    ):
        self.ctx = ctx
        self.settings = ctx.thumbnails
        self.runner = runner or FFmpegRunner()
        self.probe = probe or MediaProbe(ctx.ffprobe_path, self.runner)
        self.command_builder = CommandBuilder(ctx)
        self.classifier = get_error_classifier()

    async def generate(self) -> ThumbnailOutcome:
        mode = "sprites" if self.settings.sprites else "images"
        try:
            self.ctx.thumbs_dir.mkdir(parents=True, exist_ok=True)
            self._clear_previous()
            if self.settings.sprites:
                timeline = await self._generate_sprites()
            else:
                timeline = await self._generate_images()
        except Exception as e:
            # Thumbnails never decide the outcome of a run
            logger.warning(f"[Thumbs] {mode} generation failed; continuing: {e}")
            return ThumbnailOutcome.skip(str(e))

        logger.info(
            f"[Thumbs] {len(timeline.cues)} cue(s), {len(timeline.images)} image(s) "
            f"-> {timeline.vtt_path}"
        )
        return ThumbnailOutcome(timeline=timeline)

    def _clear_previous(self) -> None:
        """Remove images and sheets from an earlier run so they are not counted."""
        for pattern in ("thumb_[0-9]*.*", "sprite_[0-9]*.*"):
            for stale in self.ctx.thumbs_dir.glob(pattern):
                stale.unlink()

    async def _extract(self, pattern: Path) -> None:
        cmd = self.command_builder.build_frame_extract_command(pattern)
        result = await self.runner.run(cmd, label="thumbnail extract")
        if not result.ok:
            raise ThumbnailStepFailed(
                f"frame extraction failed: {self.classifier.summarize(result.stderr)}"
            )

    def _write_vtt(self, cues: List[Cue]) -> Path:
        vtt_path = self.ctx.thumbs_dir / THUMBS_VTT_NAME
        vtt_path.write_text(render_webvtt(cues), encoding="utf-8")
        return vtt_path

    async def _generate_images(self) -> ThumbnailTimeline:
        fmt = self.settings.format
        thumbs_dir = self.ctx.thumbs_dir
        await self._extract(thumbs_dir / f"thumb_%05d.{fmt}")

        count = count_sequential(thumbs_dir, THUMB_IMAGE_TEMPLATE, fmt=fmt)
        cues = image_cues(count, self.settings.interval, fmt)
        return ThumbnailTimeline(
            mode="images",
            images=[thumbs_dir / cue.image for cue in cues],
            cues=cues,
            vtt_path=self._write_vtt(cues),
        )

    async def _generate_sprites(self) -> ThumbnailTimeline:
        scratch = self.ctx.thumbs_scratch_dir
        shutil.rmtree(scratch, ignore_errors=True)
        scratch.mkdir(parents=True, exist_ok=True)
        try:
            return await self._pack_sprites(scratch)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    async def _pack_sprites(self, scratch: Path) -> ThumbnailTimeline:
        s = self.settings
        await self._extract(scratch / "f_%06d.png")

        count = count_sequential(scratch, SPRITE_FRAME_TEMPLATE)
        if count == 0:
            raise ThumbnailStepFailed("no frames were extracted")

        first = scratch / SPRITE_FRAME_TEMPLATE.format(index=1)
        size = await self.probe.probe_image_size(str(first))
        thumb_height = size[1] if size else DEFAULT_THUMB_HEIGHT

        per_sheet = s.sprite_cols * s.sprite_rows
        sheets: List[Path] = []
        for sheet_index, first_frame in enumerate(range(1, count + 1, per_sheet)):
            frames = range(first_frame, min(first_frame + per_sheet, count + 1))
            list_path = scratch / f"list_{sheet_index}.txt"
            list_path.write_text(
                "".join(_concat_line(scratch / SPRITE_FRAME_TEMPLATE.format(index=i)) for i in frames),
                encoding="utf-8",
            )

            sheet = self.ctx.thumbs_dir / SPRITE_SHEET_TEMPLATE.format(index=sheet_index, fmt=s.format)
            cmd = self.command_builder.build_sprite_command(list_path, sheet)
            result = await self.runner.run(cmd, label=f"sprite {sheet_index}")
            if not result.ok:
                raise ThumbnailStepFailed(
                    f"sprite {sheet_index} packing failed: {self.classifier.summarize(result.stderr)}"
                )
            sheets.append(sheet)

        cues = sprite_cues(count, s.interval, s.sprite_cols, s.sprite_rows, s.width, thumb_height, s.format)
        return ThumbnailTimeline(
            mode="sprites",
            images=sheets,
            cues=cues,
            vtt_path=self._write_vtt(cues),
        )
