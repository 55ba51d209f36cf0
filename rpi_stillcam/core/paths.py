"""Default locations and program names."""

from __future__ import annotations

from pathlib import Path

DEFAULT_SAVE_DIR = Path("/home/pi/Pictures")

STILL_PROGRAM = "raspistill"
RAW_PROGRAM = "raspiyuv"

__all__ = ["DEFAULT_SAVE_DIR", "RAW_PROGRAM", "STILL_PROGRAM"]
