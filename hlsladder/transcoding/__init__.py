"""
Packaging pipeline: probe, ladder, filters, rung dispatch, master playlist
and thumbnails.
"""

from .constants import DEFAULT_LADDER
from .context import RunContext
from ..models import parse_bitrate_bps
from .ladder import load_ladder, parse_rung
from .filters import FilterBuilder, validate_dimensions, rotation_filter
from .probe import MediaProbe, interpret_metadata
from .runner import FFmpegRunner, ProcessResult
from .commands import CommandBuilder
from .dispatcher import RungDispatcher
from .manifest import ManifestSynthesizer
from .thumbnails import ThumbnailGenerator
from .error_classifier import ErrorClassifier, get_error_classifier
from .engine import PackagingEngine

__all__ = [
    "DEFAULT_LADDER",
    "RunContext",
    "load_ladder",
    "parse_rung",
    "parse_bitrate_bps",
    "FilterBuilder",
    "validate_dimensions",
    "rotation_filter",
    "MediaProbe",
    "interpret_metadata",
    "FFmpegRunner",
    "ProcessResult",
    "CommandBuilder",
    "RungDispatcher",
    "ManifestSynthesizer",
    "ThumbnailGenerator",
    "ErrorClassifier",
    "get_error_classifier",
    "PackagingEngine",
]
