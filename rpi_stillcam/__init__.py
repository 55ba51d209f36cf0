"""Drive raspistill/raspiyuv from Python and reshape the frames they produce."""

from __future__ import annotations

from importlib import metadata

from .camera import (
    AWB,
    DRC,
    CaptureMode,
    CommandBuilder,
    CommandSpec,
    Encoding,
    Exposure,
    ImageEffect,
    MeteringMode,
    OptionTable,
    PixelBuffer,
    ProcessRunner,
    StillCamera,
    depad_stream,
)
from .core.errors import (
    ConfigurationError,
    LaunchError,
    RuntimeExecutionError,
    ShortReadError,
    StillCamError,
)

try:
    __version__ = metadata.version("rpi-stillcam")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "AWB",
    "CaptureMode",
    "CommandBuilder",
    "CommandSpec",
    "ConfigurationError",
    "DRC",
    "Encoding",
    "Exposure",
    "ImageEffect",
    "LaunchError",
    "MeteringMode",
    "OptionTable",
    "PixelBuffer",
    "ProcessRunner",
    "RuntimeExecutionError",
    "ShortReadError",
    "StillCamError",
    "StillCamera",
    "__version__",
    "depad_stream",
]
