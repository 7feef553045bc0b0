"""
Constants and defaults for packaging operations.
"""

from typing import Dict, List


# Ladder entries: WxH:video_bitrate:buffer_size:max_rate:audio_kbps
DEFAULT_LADDER: List[str] = [
    "1920x1080:6000k:12000k:7800k:128",
    "1280x720:3000k:6000k:4200k:128",
    "854x480:1500k:3000k:2100k:128",
    "640x360:800k:1600k:1100k:96",
]

DEFAULT_FRAME_RATE = 30.0
DEFAULT_FRAME_RATE_ROUNDED = 30

# ffprobe reports these for progressive or undetermined sources
PROGRESSIVE_FIELD_ORDERS = frozenset({"progressive", "unknown", ""})

ROTATION_FILTERS: Dict[int, str] = {
    90: "transpose=1",
    -270: "transpose=1",
    180: "hflip,vflip",
    -180: "hflip,vflip",
    270: "transpose=2",
    -90: "transpose=2",
}

DEINTERLACE_FILTER = "bwdif=mode=send_frame"
PAD_COLOR = "black"

# Output layout
MASTER_PLAYLIST_NAME = "master.m3u8"
RUNG_PLAYLIST_TEMPLATE = "v{index}.m3u8"
RUNG_SEGMENT_TEMPLATE = "v{index}_%05d.ts"
HLS_VERSION = 3

THUMBS_DIR_NAME = "thumbs"
THUMBS_SCRATCH_DIR_NAME = ".thumbs_tmp"
THUMBS_VTT_NAME = "thumbs.vtt"
THUMB_IMAGE_TEMPLATE = "thumb_{index:05d}.{fmt}"
SPRITE_FRAME_TEMPLATE = "f_{index:06d}.png"
SPRITE_SHEET_TEMPLATE = "sprite_{index:03d}.{fmt}"
DEFAULT_THUMB_HEIGHT = 90

# Kept stderr lines per ffmpeg process
STDERR_TAIL_LINES = 100
