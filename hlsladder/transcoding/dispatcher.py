"""
Rung encode dispatch.

Jobs run sequentially in ladder order, or as asyncio tasks bounded by a
semaphore. Each job validates its ladder entry only once it has been
admitted, so a malformed entry stops the run when its turn comes and
not before.

The first failure aborts the run: sibling tasks are cancelled, which
terminates their ffmpeg processes, and the error propagates. Rungs that
already finished are left on disk.
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from ..exceptions import EncodeError
from ..models import EncodeJob
from .commands import CommandBuilder
from .context import RunContext
from .error_classifier import get_error_classifier
from .filters import FilterBuilder
from .ladder import parse_rung
from .runner import FFmpegRunner

logger = logging.getLogger(__name__)


class RungDispatcher:
    """Encodes every ladder rung for one run."""

    def __init__(
        self,
        ctx: RunContext,
        runner: Optional[FFmpegRunner] = None,
        filter_builder: Optional[FilterBuilder] = None,
    ):
        self.ctx = ctx
        self.runner = runner or FFmpegRunner()
        self.filter_builder = filter_builder or FilterBuilder()
        self.command_builder = CommandBuilder(ctx)
        self.classifier = get_error_classifier()

    def build_job(self, index: int, token: str) -> EncodeJob:
        """Validate a ladder entry and compose its job."""
        rung = parse_rung(token, index)
        filters = self.filter_builder.build(rung, self.ctx.probe)
        return EncodeJob(index=index, rung=rung, filters=filters, gop=self.ctx.gop)

    async def encode(self, index: int, token: str) -> EncodeJob:
        job = self.build_job(index, token)
        cmd = self.command_builder.build_encode_command(job)

        logger.info(
            f"[Encode] Rung {index} {job.rung.resolution} @ {job.rung.video_bitrate} "
            f"(GOP {job.gop})"
        )
        started = time.monotonic()
        result = await self.runner.run(cmd, label=f"rung {index}")

        if not result.ok:
            _, category = self.classifier.classify(result.stderr)
            description = self.classifier.summarize(result.stderr)
            logger.error(
                f"[Encode] Rung {index} failed (code {result.returncode}, {category}): {description}"
            )
            raise EncodeError(index, result.returncode, description)

        logger.info(f"[Encode] Rung {index} done in {time.monotonic() - started:.1f}s")
        return job

    async def run(self, tokens: Sequence[str]) -> List[EncodeJob]:
        """Encode all rungs; returns the completed jobs in ladder order."""
        if self.ctx.parallel <= 1:
            jobs = []
            for index, token in enumerate(tokens):
                jobs.append(await self.encode(index, token))
            return jobs

        return await self._run_parallel(tokens, self.ctx.parallel)

    async def _run_parallel(self, tokens: Sequence[str], limit: int) -> List[EncodeJob]:
        semaphore = asyncio.Semaphore(limit)

        async def gated(index: int, token: str) -> EncodeJob:
            async with semaphore:
                return await self.encode(index, token)

        logger.info(f"[Encode] {len(tokens)} rung(s), up to {limit} at a time")
        tasks = [
            asyncio.create_task(gated(index, token), name=f"rung-{index}")
            for index, token in enumerate(tokens)
        ]

        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
