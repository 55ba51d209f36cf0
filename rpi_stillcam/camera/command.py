"""Assemble argument vectors for raspistill and raspiyuv."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from rpi_stillcam.core.errors import ConfigurationError
from rpi_stillcam.core.logging_utils import get_module_logger
from rpi_stillcam.core.paths import RAW_PROGRAM, STILL_PROGRAM

from .options import OptionTable
from .settings import HEIGHT_KEY, WIDTH_KEY

logger = get_module_logger("CommandBuilder")

FRAME_PLACEHOLDER = "%04d"
STDOUT_DESTINATION = "-"


class CaptureMode(Enum):
    STILL = "still"
    RAW = "raw"
    TIMELAPSE = "timelapse"

    @property
    def requires_dimensions(self) -> bool:
        return self is not CaptureMode.TIMELAPSE


@dataclass(frozen=True)
class CommandSpec:
    """Ordered argv; ``tokens[0]`` is the program to run."""

    tokens: Tuple[str, ...]

    @property
    def program(self) -> str:
        return self.tokens[0]

    @property
    def args(self) -> Tuple[str, ...]:
        return self.tokens[1:]

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __str__(self) -> str:
        return " ".join(self.tokens)


def ensure_frame_placeholder(destination: str, placeholder: str = FRAME_PLACEHOLDER) -> str:
    """Prefix the file name part of ``destination`` with ``placeholder`` if it has none."""
    head, tail = os.path.split(destination)
    if placeholder in tail:
        return destination
    return os.path.join(head, placeholder + tail) if head else placeholder + tail


class CommandBuilder:
    """Build a :class:`CommandSpec` from an option table and per-call values.

    Token order is fixed: program and mode flags, then output, width and
    height, then every enabled stored option in key order. Width and height
    stored in the table are never emitted twice.
    """

    def __init__(
        self,
        options: OptionTable,
        *,
        still_program: str = STILL_PROGRAM,
        raw_program: str = RAW_PROGRAM,
    ) -> None:
        self.options = options
        self.still_program = still_program
        self.raw_program = raw_program

    def build(
        self,
        mode: CaptureMode,
        destination: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        *,
        interval_ms: Optional[int] = None,
    ) -> CommandSpec:
        width, height = self.dimensions(width, height)
        if mode.requires_dimensions and (width is None or height is None):
            raise ConfigurationError(
                f"{mode.value} capture needs a width and height; "
                "pass them explicitly or configure them first"
            )

        tokens: list[str] = []
        if mode is CaptureMode.RAW:
            tokens += [self.raw_program, "-rgb", "-o", STDOUT_DESTINATION]
        elif mode is CaptureMode.TIMELAPSE:
            if destination is None:
                raise ConfigurationError("timelapse capture needs a destination name")
            if interval_ms is None:
                raise ConfigurationError("timelapse capture needs an interval")
            tokens += [self.still_program, "-tl", str(int(interval_ms))]
            tokens += ["-o", ensure_frame_placeholder(destination)]
        else:
            if destination is None:
                raise ConfigurationError("still capture needs a destination")
            tokens += [self.still_program, "-o", destination]

        if width is not None:
            tokens += ["-w", str(width)]
        if height is not None:
            tokens += ["-h", str(height)]

        for key, option_tokens in self.options.enabled_items():
            if key in (WIDTH_KEY, HEIGHT_KEY):
                continue
            tokens.extend(option_tokens)

        spec = CommandSpec(tuple(tokens))
        logger.debug("Built %s command: %s", mode.value, spec)
        return spec

    def dimensions(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Tuple[Optional[int], Optional[int]]:
        """Explicit width and height, falling back to the stored ones."""
        return self._resolve_dimension(WIDTH_KEY, width), self._resolve_dimension(HEIGHT_KEY, height)

    def _resolve_dimension(self, key: str, explicit: Optional[int]) -> Optional[int]:
        if explicit is not None:
            return int(explicit)
        stored = self.options.tokens(key)
        if stored is None:
            return None
        try:
            return int(stored[-1])
        except ValueError as exc:
            raise ConfigurationError(f"Stored {key} {stored!r} is not a number") from exc


__all__ = [
    "CaptureMode",
    "CommandBuilder",
    "CommandSpec",
    "FRAME_PLACEHOLDER",
    "STDOUT_DESTINATION",
    "ensure_frame_placeholder",
]
