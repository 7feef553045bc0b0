"""
Async execution of ffmpeg/ffprobe processes.
"""

import asyncio
import logging
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import Any, Dict, List

from .constants import STDERR_TAIL_LINES

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    returncode: int
    stdout: bytes = b""
    stderr: str = ""  # last STDERR_TAIL_LINES lines

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class FFmpegRunner:
    """
    Runs one external process to completion.

    There is no timeout: a launched process runs until it exits or the
    awaiting task is cancelled, in which case the process is terminated
    before CancelledError propagates.
    """

    async def run(self, cmd: List[str], label: str = "ffmpeg") -> ProcessResult:
        """
        Run a process, draining stdout and stderr in separate tasks.

        Returns:
            ProcessResult. Return code is -1 if the process could not start.
        """
        logger.debug(f"[Run] {label}: {' '.join(cmd)}")

        kwargs: Dict[str, Any] = {
            "stdin": asyncio.subprocess.DEVNULL,
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.PIPE,
        }
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

        try:
            process = await asyncio.create_subprocess_exec(*cmd, **kwargs)
        except OSError as e:
            logger.error(f"[Run] Failed to start {label}: {e}")
            return ProcessResult(returncode=-1, stderr=str(e))

        stdout_chunks: List[bytes] = []
        stderr_lines: List[str] = []

        async def read_stdout():
            while True:
                chunk = await process.stdout.read(4096)
                if not chunk:
                    break
                stdout_chunks.append(chunk)

        async def read_stderr():
            while True:
                line = await process.stderr.readline()
                if not line:
                    break
                stderr_lines.append(line.decode("utf-8", errors="ignore"))
                # Keep only the tail to avoid memory growth on long encodes
                if len(stderr_lines) > STDERR_TAIL_LINES:
                    stderr_lines.pop(0)

        try:
            await asyncio.gather(read_stdout(), read_stderr())
            await process.wait()
        except asyncio.CancelledError:
            logger.info(f"[Run] {label} cancelled, terminating")
            await self._graceful_terminate(process)
            raise

        return ProcessResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=b"".join(stdout_chunks),
            stderr="".join(stderr_lines),
        )

    async def _graceful_terminate(self, process: asyncio.subprocess.Process) -> None:
        """
        Stop a process: SIGINT (CTRL_BREAK_EVENT on Windows) so ffmpeg can
        finalize, then SIGTERM, then kill.
        """
        if process.returncode is not None:
            return

        try:
            if sys.platform == "win32":
                process.send_signal(signal.CTRL_BREAK_EVENT)
            else:
                process.send_signal(signal.SIGINT)
        except (ProcessLookupError, OSError):
            pass

        try:
            await asyncio.wait_for(process.wait(), timeout=5.0)
            return
        except asyncio.TimeoutError:
            pass

        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=3.0)
            return
        except (asyncio.TimeoutError, ProcessLookupError, OSError):
            pass

        try:
            process.kill()
            await process.wait()
            logger.warning("[Run] Process killed forcefully")
        except (ProcessLookupError, OSError):
            pass
