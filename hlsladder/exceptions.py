"""
Exception hierarchy for hlsladder.

Everything raised here is fatal to a packaging run. Best-effort steps
(thumbnails) catch their own failures and never raise these.
"""

from typing import Optional


class HLSLadderError(Exception):
    """Base class for all packaging errors."""


class ConfigurationError(HLSLadderError):
    """The run cannot start with the given tools, ladder or settings."""


class ToolNotFoundError(ConfigurationError):
    """A required external executable is missing."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Missing dependency: {tool}")


class LadderError(ConfigurationError):
    """The ladder definition is unusable (missing file, no entries)."""


class RungValidationError(ConfigurationError):
    """A single ladder entry is malformed."""

    def __init__(self, message: str, rung_index: Optional[int] = None):
        self.rung_index = rung_index
        super().__init__(message)


class ProbeError(HLSLadderError):
    """Source metadata could not be read or has no video stream."""


class EncodeError(HLSLadderError):
    """A rung encode exited with a non-zero status."""

    def __init__(self, rung_index: int, returncode: int, description: str = "Unknown error"):
        self.rung_index = rung_index
        self.returncode = returncode
        self.description = description
        super().__init__(
            f"Rung {rung_index} encode failed (code {returncode}): {description}"
        )
