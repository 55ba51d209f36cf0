"""Camera configuration, command building and capture."""

from .command import CaptureMode, CommandBuilder, CommandSpec, FRAME_PLACEHOLDER
from .depad import PaddingGeometry, PixelBuffer, depad_stream, pad_to_alignment
from .enums import AWB, DRC, Encoding, Exposure, ImageEffect, MeteringMode
from .link import resolve_link_path
from .options import DISABLED, OptionTable
from .process import ByteSource, CaptureHandle, ExitStatus, ProcessRunner
from .settings import CameraSettings, clamp, normalize_rotation
from .still_camera import StillCamera, StillResult, TimelapseResult

__all__ = [
    "AWB",
    "ByteSource",
    "CameraSettings",
    "CaptureHandle",
    "CaptureMode",
    "CommandBuilder",
    "CommandSpec",
    "DISABLED",
    "DRC",
    "Encoding",
    "ExitStatus",
    "Exposure",
    "FRAME_PLACEHOLDER",
    "ImageEffect",
    "MeteringMode",
    "OptionTable",
    "PaddingGeometry",
    "PixelBuffer",
    "ProcessRunner",
    "StillCamera",
    "StillResult",
    "TimelapseResult",
    "clamp",
    "depad_stream",
    "normalize_rotation",
    "pad_to_alignment",
    "resolve_link_path",
]
