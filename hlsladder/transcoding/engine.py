"""
Packaging engine that runs one source through the whole pipeline.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import List, Optional, Union

from ..config import HLSLadderConfig, get_config
from ..exceptions import ToolNotFoundError
from ..models import PackageResult
from .context import RunContext
from .dispatcher import RungDispatcher
from .ladder import load_ladder
from .manifest import ManifestSynthesizer
from .probe import MediaProbe
from .runner import FFmpegRunner
from .thumbnails import ThumbnailGenerator

logger = logging.getLogger(__name__)


class PackagingEngine:
    """
    Orchestrates a packaging run.

    Order matters: tools and ladder are checked before the source is
    probed, every rung is joined before the master is written, and
    thumbnails come last so they cannot affect the rungs.
    """

    def __init__(
        self,
        config: Optional[HLSLadderConfig] = None,
        runner: Optional[FFmpegRunner] = None,
    ):
        self.config = config or get_config()
        self.runner = runner or FFmpegRunner()

    def _find_tool(self, name: str, configured: str) -> str:
        """Resolve an executable from config ("auto" searches PATH)."""
        candidate = name if configured == "auto" else configured
        found = shutil.which(candidate)
        if found:
            return found
        raise ToolNotFoundError(candidate)

    def find_ffmpeg(self) -> str:
        return self._find_tool("ffmpeg", self.config.transcoding.ffmpeg_path)

    def find_ffprobe(self) -> str:
        return self._find_tool("ffprobe", self.config.transcoding.ffprobe_path)

    def load_ladder(self, ladder_path: Optional[Union[str, Path]] = None) -> List[str]:
        path = ladder_path or self.config.transcoding.ladder_file
        return load_ladder(Path(path) if path else None)

    async def package(
        self,
        source: str,
        output_dir: Union[str, Path],
        ladder_path: Optional[Union[str, Path]] = None,
    ) -> PackageResult:
        """
        Encode every rung, write master.m3u8 and, if enabled, thumbnails.

        Raises:
            ConfigurationError: missing tools, empty ladder, malformed rung.
            ProbeError: the source cannot be probed.
            EncodeError: a rung encode failed.
        """
        started = time.monotonic()
        ffmpeg_path = self.find_ffmpeg()
        ffprobe_path = self.find_ffprobe()
        tokens = self.load_ladder(ladder_path)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        probe = await MediaProbe(ffprobe_path, self.runner).get_source_probe(source)

        ctx = RunContext(
            source=str(source),
            output_dir=output_dir,
            probe=probe,
            transcoding=self.config.transcoding.model_copy(deep=True),
            thumbnails=self.config.thumbnails.model_copy(deep=True),
            ffmpeg_path=ffmpeg_path,
            ffprobe_path=ffprobe_path,
        )
        logger.info(
            f"[Package] {source} -> {output_dir}: {len(tokens)} rung(s), "
            f"segment {ctx.segment_duration}s, GOP {ctx.gop}, parallel {ctx.parallel}"
        )

        await RungDispatcher(ctx, self.runner).run(tokens)
        manifest = ManifestSynthesizer(ctx).build(tokens)

        thumbnails = None
        if ctx.thumbnails.enabled:
            thumbnails = await ThumbnailGenerator(ctx, self.runner).generate()

        logger.info(f"[Package] Done in {time.monotonic() - started:.1f}s: {ctx.master_path}")
        return PackageResult(
            output_dir=output_dir,
            master_path=ctx.master_path,
            manifest=manifest,
            probe=probe,
            thumbnails=thumbnails,
        )
