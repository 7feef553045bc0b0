"""
FFmpeg error classification for failure reporting.

Packaging never retries, so classification only decides what an operator
is told: a short description and a category for the log line.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class FFmpegError:
    """Represents a classified FFmpeg error."""
    pattern: str
    category: str  # 'input', 'filter', 'encoder', 'resource', 'io'
    description: str


# Checked in order; put specific patterns before generic ones
FFMPEG_ERROR_MAP: List[FFmpegError] = [
    # === Source problems ===
    FFmpegError("moov atom not found", "input", "Truncated or invalid MP4 source"),
    FFmpegError("invalid data found when processing input", "input", "Invalid input data"),
    FFmpegError("stream map '0:a:0' matches no streams", "input", "Source has no audio stream"),
    FFmpegError("matches no streams", "input", "Requested stream missing from source"),
    FFmpegError("no such file or directory", "input", "File not found"),
    FFmpegError("decoder not found", "input", "No decoder for source codec"),
    FFmpegError("end of file", "input", "Unexpected end of file"),

    # === Filter graph ===
    FFmpegError("no such filter", "filter", "Filter not available in this ffmpeg build"),
    FFmpegError("error initializing filter", "filter", "Filter initialization failed"),
    FFmpegError("error reinitializing filters", "filter", "Filter graph failed mid-stream"),
    FFmpegError("invalid too big or non positive size", "filter", "Invalid scale/pad size"),
    FFmpegError("padded dimensions cannot be smaller", "filter", "Pad size smaller than input"),

    # === Encoder ===
    FFmpegError("unknown encoder", "encoder", "Encoder not available in this ffmpeg build"),
    FFmpegError("encoder not found", "encoder", "Encoder not found"),
    FFmpegError("error setting profile", "encoder", "Unsupported encoder profile"),
    FFmpegError("error while opening encoder", "encoder", "Encoder rejected parameters"),
    FFmpegError("incompatible pixel format", "encoder", "Incompatible pixel format for encoder"),
    FFmpegError("invalid argument", "encoder", "Invalid argument"),

    # === Resources ===
    FFmpegError("cannot allocate memory", "resource", "Memory allocation failed"),
    FFmpegError("out of memory", "resource", "Out of memory"),
    FFmpegError("too many open files", "resource", "File descriptor limit"),

    # === Output ===
    FFmpegError("no space left", "io", "No disk space"),
    FFmpegError("disk quota", "io", "Disk quota exceeded"),
    FFmpegError("permission denied", "io", "Permission denied"),
    FFmpegError("read-only file system", "io", "Output is on a read-only file system"),
]


class ErrorClassifier:
    """Classifies FFmpeg stderr output."""

    def __init__(self, error_map: Optional[List[FFmpegError]] = None):
        self.error_map = error_map or FFMPEG_ERROR_MAP

    def classify(self, error_msg: str) -> Tuple[Optional[FFmpegError], str]:
        """
        Classify FFmpeg error using the error map.

        Returns:
            Tuple of (matched_error, category). Category is 'unknown' if no match.
        """
        error_lower = error_msg.lower()

        for error in self.error_map:
            if error.pattern in error_lower:
                return error, error.category

        return None, "unknown"

    def get_error_description(self, error_msg: str) -> str:
        """Get human-readable description of the error."""
        error, _ = self.classify(error_msg)
        if error:
            return error.description
        return "Unknown error"

    def summarize(self, error_msg: str) -> str:
        """Description plus the last non-empty stderr line, for logs."""
        description = self.get_error_description(error_msg)
        lines = [line.strip() for line in error_msg.splitlines() if line.strip()]
        if lines:
            return f"{description} ({lines[-1][:200]})"
        return description


# Global classifier instance
_classifier: Optional[ErrorClassifier] = None


def get_error_classifier() -> ErrorClassifier:
    """Get or create the global error classifier."""
    global _classifier
    if _classifier is None:
        _classifier = ErrorClassifier()
    return _classifier
