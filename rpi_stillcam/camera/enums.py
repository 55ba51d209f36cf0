"""Mode catalogs accepted by raspistill/raspiyuv.

Each member's value is the exact lowercase word placed on the command line.
"""

from __future__ import annotations

from enum import Enum


class _CommandWord(str, Enum):

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str):
        """Look a member up by name or value, ignoring case."""
        key = str(name).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown {cls.__name__} '{name}'")


class AWB(_CommandWord):
    OFF = "off"
    AUTO = "auto"
    SUN = "sun"
    CLOUD = "cloud"
    SHADE = "shade"
    TUNGSTEN = "tungsten"
    FLUORESCENT = "fluorescent"
    INCANDESCENT = "incandescent"
    FLASH = "flash"
    HORIZON = "horizon"


class DRC(_CommandWord):
    OFF = "off"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Encoding(_CommandWord):
    JPG = "jpg"
    BMP = "bmp"
    GIF = "gif"
    PNG = "png"


class Exposure(_CommandWord):
    AUTO = "auto"
    NIGHT = "night"
    NIGHTPREVIEW = "nightpreview"
    BACKLIGHT = "backlight"
    SPOTLIGHT = "spotlight"
    SPORTS = "sports"
    SNOW = "snow"
    BEACH = "beach"
    VERYLONG = "verylong"
    FIXEDFPS = "fixedfps"
    ANTISHAKE = "antishake"
    FIREWORKS = "fireworks"


class ImageEffect(_CommandWord):
    NONE = "none"
    NEGATIVE = "negative"
    SOLARISE = "solarise"
    POSTERISE = "posterise"
    WHITEBOARD = "whiteboard"
    BLACKBOARD = "blackboard"
    SKETCH = "sketch"
    DENOISE = "denoise"
    EMBOSS = "emboss"
    OILPAINT = "oilpaint"
    HATCH = "hatch"
    GPEN = "gpen"
    PASTEL = "pastel"
    WATERCOLOUR = "watercolour"
    FILM = "film"
    BLUR = "blur"
    SATURATION = "saturation"
    COLOURSWAP = "colourswap"
    WASHEDOUT = "washedout"
    COLOURPOINT = "colourpoint"
    COLOURBALANCE = "colourbalance"
    CARTOON = "cartoon"


class MeteringMode(_CommandWord):
    AVERAGE = "average"
    SPOT = "spot"
    BACKLIT = "backlit"
    MATRIX = "matrix"


__all__ = ["AWB", "DRC", "Encoding", "Exposure", "ImageEffect", "MeteringMode"]
