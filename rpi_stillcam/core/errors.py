"""Exception hierarchy for capture configuration and execution."""

from __future__ import annotations

from typing import Optional


class StillCamError(Exception):
    """Base class for every error raised by rpi_stillcam."""


class ConfigurationError(StillCamError):
    """A parameter required to build a command was never supplied."""


class LaunchError(StillCamError):
    """The external capture program could not be started."""

    def __init__(self, program: str, message: Optional[str] = None) -> None:
        self.program = program
        super().__init__(message or f"Failed to launch {program!r}")


class RuntimeExecutionError(StillCamError):
    """The program started but its output could not be read."""


class ShortReadError(StillCamError):
    """The raw pixel stream closed before a full frame arrived.

    Attributes:
        captured: Bytes copied into the output buffer before the stream closed.
        consumed: Bytes read from the stream, including skipped padding.
        expected: Bytes the output buffer needed.
    """

    def __init__(self, captured: int, expected: int, consumed: Optional[int] = None) -> None:
        self.captured = captured
        self.expected = expected
        self.consumed = captured if consumed is None else consumed
        super().__init__(
            f"Pixel stream ended after {captured} of {expected} bytes "
            f"({self.consumed} bytes read)"
        )


__all__ = [
    "ConfigurationError",
    "LaunchError",
    "RuntimeExecutionError",
    "ShortReadError",
    "StillCamError",
]
