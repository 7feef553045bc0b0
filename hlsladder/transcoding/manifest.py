"""
Master playlist synthesis.

The master lists a rung only if that rung's playlist exists on disk. It is
always written, even with no entries.
"""

import logging
from pathlib import Path
from typing import Sequence

from ..models import ManifestEntry, MasterManifest
from .constants import HLS_VERSION
from .context import RunContext
from .ladder import parse_rung

logger = logging.getLogger(__name__)


class ManifestSynthesizer:
    """Builds master.m3u8 from the ladder and the rung playlists present."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def synthesize(self, tokens: Sequence[str]) -> MasterManifest:
        manifest = MasterManifest(version=HLS_VERSION)

        for index, token in enumerate(tokens):
            if not self.ctx.playlist_path(index).is_file():
                logger.debug(f"[Manifest] Rung {index} has no playlist, skipping")
                continue

            rung = parse_rung(token, index)
            manifest.entries.append(ManifestEntry(
                rung=rung,
                uri=self.ctx.playlist_name(index),
                bandwidth=rung.peak_bandwidth,
                average_bandwidth=rung.average_bandwidth,
                codecs=self.ctx.transcoding.codecs,
                frame_rate=self.ctx.probe.frame_rate_rounded,
            ))

        return manifest

    def write(self, manifest: MasterManifest, path: Path) -> Path:
        path.write_text(manifest.render(), encoding="utf-8")
        logger.info(f"[Manifest] Wrote {path} with {len(manifest.entries)} rung(s)")
        return path

    def build(self, tokens: Sequence[str]) -> MasterManifest:
        """Synthesize and write to the run's master path."""
        manifest = self.synthesize(tokens)
        self.write(manifest, self.ctx.master_path)
        return manifest
