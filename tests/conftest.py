"""
hlsladder Test Configuration and Fixtures

Provides:
- Auto-generated test media files (no external downloads needed)
- A fake ffmpeg/ffprobe runner that fabricates output files
- Shared fixtures for run contexts and config
"""

import asyncio
import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest

from hlsladder.config import HLSLadderConfig, ThumbnailConfig, TranscodingConfig, set_config
from hlsladder.models import SourceProbe
from hlsladder.transcoding.context import RunContext
from hlsladder.transcoding.runner import ProcessResult


# =============================================================================
# TEST MEDIA GENERATION
# =============================================================================

class TestMediaGenerator:
    """
    Generates test media files using FFmpeg.
    No external downloads - creates synthetic test videos.
    """

    __test__ = False

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._ffmpeg = shutil.which("ffmpeg")

    @property
    def has_ffmpeg(self) -> bool:
        return self._ffmpeg is not None and shutil.which("ffprobe") is not None

    def generate_test_video(
        self,
        name: str = "test_video",
        duration: int = 5,
        width: int = 1280,
        height: int = 720,
        fps: int = 30,
    ) -> Optional[Path]:
        """
        Generate a test video with color bars and tone.

        Returns:
            Path to generated video, or None if FFmpeg not available
        """
        if not self.has_ffmpeg:
            return None

        output_path = self.output_dir / f"{name}.mp4"

        cmd = [
            self._ffmpeg,
            "-y",
            "-f", "lavfi",
            "-i", f"testsrc=duration={duration}:size={width}x{height}:rate={fps}",
            "-f", "lavfi",
            "-i", f"sine=frequency=440:duration={duration}",
            "-c:v", "libx264",
            "-preset", "ultrafast",
            "-pix_fmt", "yuv420p",
            "-c:a", "aac", "-b:a", "128k",
            str(output_path),
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, timeout=60)
            if result.returncode == 0 and output_path.exists():
                return output_path
        except (subprocess.TimeoutExpired, OSError) as e:
            print(f"Failed to generate test video: {e}")

        return None


# =============================================================================
# FAKE PROCESS RUNNER
# =============================================================================

def video_metadata(
    avg_frame_rate: str = "30000/1001",
    r_frame_rate: str = "30000/1001",
    rotation: Optional[int] = None,
    field_order: Optional[str] = "progressive",
) -> Dict[str, Any]:
    """ffprobe -show_streams style document with one video and one audio stream."""
    video: Dict[str, Any] = {
        "index": 0,
        "codec_type": "video",
        "codec_name": "h264",
        "width": 1920,
        "height": 1080,
        "avg_frame_rate": avg_frame_rate,
        "r_frame_rate": r_frame_rate,
    }
    if rotation is not None:
        video["side_data_list"] = [{"side_data_type": "Display Matrix", "rotation": rotation}]
    if field_order is not None:
        video["field_order"] = field_order
    return {
        "streams": [
            video,
            {"index": 1, "codec_type": "audio", "codec_name": "aac"},
        ],
        "format": {"format_name": "mov,mp4,m4a,3gp,3g2,mj2"},
    }


class FakeRunner:
    """
    Stands in for FFmpegRunner.

    Encodes write a playlist and one segment, frame extraction writes
    `frames` numbered files, sprite packing writes the sheet.
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None, frames: int = 3):
        self.metadata = metadata if metadata is not None else video_metadata()
        self.frames = frames
        self.image_size: Optional[str] = "160x90"
        self.fail_rungs: Set[int] = set()
        self.fail_probe = False
        self.fail_extract = False
        self.fail_sprite = False
        self.delay = 0.0
        self.calls: List[List[str]] = []
        self.encoded: List[int] = []
        self.active = 0
        self.max_active = 0

    def commands_for(self, marker: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if marker in cmd]

    async def run(self, cmd: List[str], label: str = "ffmpeg") -> ProcessResult:
        self.calls.append(list(cmd))
        if Path(cmd[0]).name.startswith("ffprobe"):
            return self._ffprobe(cmd)
        if "hls" in cmd:
            return await self._encode(cmd)
        if "concat" in cmd:
            if self.fail_sprite:
                return ProcessResult(returncode=1, stderr="Error initializing filter 'tile'\n")
            Path(cmd[-1]).write_bytes(b"sprite")
            return ProcessResult(returncode=0)
        return self._extract(cmd)

    def _ffprobe(self, cmd: List[str]) -> ProcessResult:
        if "-show_streams" in cmd:
            if self.fail_probe:
                return ProcessResult(returncode=1, stderr="No such file or directory\n")
            return ProcessResult(returncode=0, stdout=json.dumps(self.metadata).encode())
        if self.image_size is None:
            return ProcessResult(returncode=1, stderr="Invalid data found when processing input\n")
        return ProcessResult(returncode=0, stdout=f"{self.image_size}\n".encode())

    async def _encode(self, cmd: List[str]) -> ProcessResult:
        playlist = Path(cmd[-1])
        index = int(playlist.stem[1:])
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1

        if index in self.fail_rungs:
            return ProcessResult(returncode=1, stderr="Error while opening encoder for output stream #0:0\n")

        playlist.write_text("#EXTM3U\n#EXT-X-PLAYLIST-TYPE:VOD\n#EXT-X-ENDLIST\n")
        (playlist.parent / f"v{index}_00000.ts").write_bytes(b"\x47")
        self.encoded.append(index)
        return ProcessResult(returncode=0)

    def _extract(self, cmd: List[str]) -> ProcessResult:
        if self.fail_extract:
            return ProcessResult(returncode=1, stderr="Invalid data found when processing input\n")
        pattern = cmd[-1]
        for i in range(1, self.frames + 1):
            Path(pattern % i).write_bytes(b"frame")
        return ProcessResult(returncode=0)


# =============================================================================
# PYTEST FIXTURES
# =============================================================================

@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def temp_output_dir(tmp_path) -> Path:
    """Per-test temp directory for output files."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def make_context(temp_output_dir):
    """Factory for RunContext with overridable settings."""

    def _make(
        probe: Optional[SourceProbe] = None,
        transcoding: Optional[Dict[str, Any]] = None,
        thumbnails: Optional[Dict[str, Any]] = None,
    ) -> RunContext:
        return RunContext(
            source="input.mp4",
            output_dir=temp_output_dir,
            probe=probe or SourceProbe(frame_rate=29.97, frame_rate_rounded=30),
            transcoding=TranscodingConfig(**(transcoding or {})),
            thumbnails=ThumbnailConfig(**(thumbnails or {})),
            ffmpeg_path="ffmpeg",
            ffprobe_path="ffprobe",
        )

    return _make


@pytest.fixture
def test_config() -> HLSLadderConfig:
    """Default configuration, installed as the global config."""
    config = HLSLadderConfig()
    config.logging.level = "WARNING"
    set_config(config)
    return config


@pytest.fixture
def fake_tools(monkeypatch):
    """Pretend ffmpeg and ffprobe are installed."""
    monkeypatch.setattr(
        "hlsladder.transcoding.engine.shutil.which",
        lambda name: f"/usr/bin/{Path(name).name}",
    )


@pytest.fixture(scope="session")
def test_media_dir(tmp_path_factory) -> Path:
    """
    Session-scoped temp directory for test media.
    Auto-cleaned after all tests complete.
    """
    return tmp_path_factory.mktemp("hlsladder_test_media")


@pytest.fixture(scope="session")
def media_generator(test_media_dir) -> TestMediaGenerator:
    return TestMediaGenerator(test_media_dir)


@pytest.fixture(scope="session")
def quick_test_video(media_generator) -> Path:
    """Short 640x360 test video; skips when FFmpeg is unavailable."""
    if not media_generator.has_ffmpeg:
        pytest.skip("FFmpeg not available for test media generation")
    path = media_generator.generate_test_video("test_quick", duration=4, width=640, height=360)
    if path is None:
        pytest.skip("Failed to generate test video")
    return path


# =============================================================================
# MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "requires_ffmpeg: marks tests that require FFmpeg"
    )
