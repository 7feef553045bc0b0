"""
Configuration management for hlsladder
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TranscodingConfig(BaseModel):
    ffmpeg_path: str = "auto"
    ffprobe_path: str = "auto"
    segment_duration: int = Field(default=6, gt=0)  # seconds per HLS segment
    parallel: int = Field(default=1, ge=0)  # concurrent rung encodes; 0 or 1 is sequential
    ladder_file: Optional[str] = None  # None = built-in four rung ladder
    # Encoder options shared by every rung
    video_encoder: str = "libx264"
    profile: str = "high"
    level: str = "4.1"
    preset: str = "veryfast"
    pixel_format: str = "yuv420p"
    audio_codec: str = "aac"
    audio_channels: int = 2
    audio_sample_rate: int = 48000
    codecs: str = "avc1.640028,mp4a.40.2"  # CODECS attribute in master.m3u8


class ThumbnailConfig(BaseModel):
    enabled: bool = False
    sprites: bool = False  # sprite sheets instead of one image per interval
    interval: int = Field(default=10, gt=0)  # seconds between thumbnails
    width: int = Field(default=160, gt=0)  # height follows aspect ratio
    format: Literal["webp", "jpg", "png"] = "webp"
    sprite_cols: int = Field(default=10, gt=0)
    sprite_rows: int = Field(default=10, gt=0)


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8766


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file: Optional[str] = None


class HLSLadderConfig(BaseSettings):
    """
    Root configuration.

    Values come from the YAML file; HLSLADDER_* environment variables
    override them, e.g. HLSLADDER_TRANSCODING__PARALLEL=3.
    """

    model_config = SettingsConfigDict(
        env_prefix="HLSLADDER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    transcoding: TranscodingConfig = Field(default_factory=TranscodingConfig)
    thumbnails: ThumbnailConfig = Field(default_factory=ThumbnailConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings


def find_config_file() -> Optional[Path]:
    """Find the configuration file in standard locations."""
    search_paths = [
        Path.cwd() / "hlsladder.yaml",
        Path.cwd() / "hlsladder.yml",
        Path.cwd() / "config" / "hlsladder.yaml",
        Path.home() / ".config" / "hlsladder" / "hlsladder.yaml",
        Path("/etc/hlsladder/hlsladder.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_config(config_path: Optional[str] = None) -> HLSLadderConfig:
    """Load configuration from YAML file or use defaults."""
    config_file = Path(config_path) if config_path else find_config_file()

    if config_file and config_file.exists():
        with open(config_file, "r") as f:
            yaml_data = yaml.safe_load(f) or {}
        return HLSLadderConfig(**yaml_data)

    return HLSLadderConfig()


# Global config instance
_config: Optional[HLSLadderConfig] = None


def get_config() -> HLSLadderConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: HLSLadderConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
