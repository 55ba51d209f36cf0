"""Caller-facing setters that clamp values before storing flag tokens."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union

from rpi_stillcam.core.logging_utils import get_module_logger

from .enums import AWB, DRC, Encoding, Exposure, ImageEffect, MeteringMode
from .options import DISABLED, OptionTable

logger = get_module_logger("CameraSettings")

SHARPNESS_RANGE = (-100, 100)
CONTRAST_RANGE = (-100, 100)
SATURATION_RANGE = (-100, 100)
BRIGHTNESS_RANGE = (0, 100)
QUALITY_RANGE = (0, 100)
SHUTTER_RANGE_US = (0, 6_000_000)
OPACITY_RANGE = (0, 255)
COLOUR_EFFECT_RANGE = (0, 255)
CAMERA_INDEX_RANGE = (0, 1)
ROI_RANGE = (0.0, 1.0)

# Option keys whose tokens are emitted explicitly by the command builder.
WIDTH_KEY = "width"
HEIGHT_KEY = "height"
LINK_LATEST_KEY = "latest"

Number = Union[int, float]
E = TypeVar("E")
S = TypeVar("S", bound="CameraSettings")


def clamp(value: Number, low: Number, high: Number) -> Number:
    if value > high:
        return high
    if value < low:
        return low
    return value


def normalize_rotation(rotation: int) -> int:
    """Fold any angle into [0, 360)."""
    return int(rotation) % 360


def _coerce_enum(enum_type: Type[E], value: Union[E, str]) -> E:
    if isinstance(value, enum_type):
        return value
    if isinstance(value, bool):
        # config files read "off" and "on" as booleans
        value = "on" if value else "off"
    return enum_type.parse(value)


class CameraSettings:
    """Fluent setter surface over an :class:`OptionTable`.

    Every setter returns ``self`` so calls can be chained. Out-of-range
    numbers are clamped silently to the documented bounds.
    """

    def __init__(self, options: Optional[OptionTable] = None) -> None:
        self.options = options if options is not None else OptionTable()

    # ------------------------------------------------------------------
    # Preview

    def turn_off_preview(self: S) -> S:
        self.options.set("preview", ("-n",))
        return self

    def turn_on_preview(
        self: S,
        x: Optional[int] = None,
        y: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> S:
        """Enable the preview, optionally in a window at ``x,y`` of ``width x height``."""
        window = (x, y, width, height)
        if all(part is None for part in window):
            self.options.disable("preview")
        elif any(part is None for part in window):
            raise ValueError("Preview window needs x, y, width and height together")
        else:
            self.options.set("preview", ("-p", ",".join(str(int(part)) for part in window)))
        return self

    def set_full_preview(self: S, enabled: bool) -> S:
        self.options.set("fullpreview", ("-fp",) if enabled else DISABLED)
        return self

    def set_preview_fullscreen(self: S, fullscreen: bool) -> S:
        self.options.set("fullscreen", ("-f",) if fullscreen else DISABLED)
        return self

    def set_preview_opacity(self: S, opacity: int) -> S:
        self.options.set("opacity", ("-op", clamp(int(opacity), *OPACITY_RANGE)))
        return self

    # ------------------------------------------------------------------
    # Image parameters

    def set_sharpness(self: S, sharpness: int) -> S:
        self.options.set("sharpness", ("-sh", clamp(int(sharpness), *SHARPNESS_RANGE)))
        return self

    def set_contrast(self: S, contrast: int) -> S:
        self.options.set("contrast", ("-co", clamp(int(contrast), *CONTRAST_RANGE)))
        return self

    def set_brightness(self: S, brightness: int) -> S:
        self.options.set("brightness", ("-br", clamp(int(brightness), *BRIGHTNESS_RANGE)))
        return self

    def set_saturation(self: S, saturation: int) -> S:
        self.options.set("saturation", ("-sa", clamp(int(saturation), *SATURATION_RANGE)))
        return self

    def set_iso(self: S, iso: int) -> S:
        self.options.set("ISO", ("-ISO", int(iso)))
        return self

    def set_exposure(self: S, exposure: Union[Exposure, str]) -> S:
        self.options.set("exposure", ("-ex", _coerce_enum(Exposure, exposure)))
        return self

    def set_awb(self: S, awb: Union[AWB, str]) -> S:
        self.options.set("awb", ("-awb", _coerce_enum(AWB, awb)))
        return self

    def set_image_effect(self: S, effect: Union[ImageEffect, str]) -> S:
        self.options.set("imxfx", ("-ifx", _coerce_enum(ImageEffect, effect)))
        return self

    def set_colour_effect(self: S, u: int, v: int) -> S:
        u = clamp(int(u), *COLOUR_EFFECT_RANGE)
        v = clamp(int(v), *COLOUR_EFFECT_RANGE)
        self.options.set("colfx", ("-cfx", f"{u}:{v}"))
        return self

    def set_metering_mode(self: S, mode: Union[MeteringMode, str]) -> S:
        self.options.set("metering", ("-mm", _coerce_enum(MeteringMode, mode)))
        return self

    def set_rotation(self: S, rotation: int) -> S:
        self.options.set("rotation", ("-rot", normalize_rotation(rotation)))
        return self

    def set_horizontal_flip(self: S, enabled: bool) -> S:
        self.options.set("hflip", ("-hf",) if enabled else DISABLED)
        return self

    def set_vertical_flip(self: S, enabled: bool) -> S:
        self.options.set("vflip", ("-vf",) if enabled else DISABLED)
        return self

    def set_region_of_interest(self: S, x: float, y: float, width: float, height: float) -> S:
        """Crop to a normalized rectangle; each field is clamped to [0.0, 1.0]."""
        fields = [clamp(float(part), *ROI_RANGE) for part in (x, y, width, height)]
        self.options.set("roi", ("-roi", ",".join(str(float(part)) for part in fields)))
        return self

    def set_shutter(self: S, speed_us: int) -> S:
        self.options.set("shutter", ("-ss", clamp(int(speed_us), *SHUTTER_RANGE_US)))
        return self

    def set_drc(self: S, drc: Union[DRC, str]) -> S:
        self.options.set("drc", ("-drc", _coerce_enum(DRC, drc)))
        return self

    # ------------------------------------------------------------------
    # Application settings

    def set_width(self: S, width: int) -> S:
        self.options.set(WIDTH_KEY, ("-w", int(width)))
        return self

    def set_height(self: S, height: int) -> S:
        self.options.set(HEIGHT_KEY, ("-h", int(height)))
        return self

    def set_quality(self: S, quality: int) -> S:
        self.options.set("quality", ("-q", clamp(int(quality), *QUALITY_RANGE)))
        return self

    def set_add_raw_bayer(self: S, enabled: bool) -> S:
        self.options.set("raw", ("-r",) if enabled else DISABLED)
        return self

    def set_link_latest_image(self: S, link: bool, file_name: Optional[str] = None) -> S:
        if link:
            if not file_name:
                raise ValueError("A file name is required to link the latest image")
            self.options.set(LINK_LATEST_KEY, ("-l", str(file_name)))
        else:
            self.options.disable(LINK_LATEST_KEY)
        return self

    def set_timeout(self: S, timeout_ms: int) -> S:
        self.options.set("timeout", ("-t", int(timeout_ms)))
        return self

    def set_thumbnail_params(self: S, x: int, y: int, quality: int) -> S:
        self.options.set("thumb", ("-th", f"{int(x)}:{int(y)}:{int(quality)}"))
        return self

    def turn_off_thumbnail(self: S) -> S:
        self.options.set("thumb", ("-th", "none"))
        return self

    def set_encoding(self: S, encoding: Union[Encoding, str]) -> S:
        self.options.set("encoding", ("-e", _coerce_enum(Encoding, encoding)))
        return self

    def select_camera(self: S, index: int) -> S:
        self.options.set("camselect", ("-cs", clamp(int(index), *CAMERA_INDEX_RANGE)))
        return self

    def set_burst(self: S, enabled: bool) -> S:
        self.options.set("burst", ("-bm",) if enabled else DISABLED)
        return self

    def set_date_time(self: S, enabled: bool) -> S:
        self.options.set("datetime", ("-dt",) if enabled else DISABLED)
        return self

    def set_timestamp(self: S, enabled: bool) -> S:
        self.options.set("timestamp", ("-ts",) if enabled else DISABLED)
        return self

    # ------------------------------------------------------------------
    # Bulk configuration

    def apply_config(self: S, config: Mapping[str, Any]) -> S:
        """Apply ``key = value`` pairs (as parsed by ConfigLoader) through the setters.

        Unknown keys and values the setters reject are logged and skipped.
        """
        for key, value in config.items():
            handler = _CONFIG_HANDLERS.get(key)
            if handler is None:
                logger.debug("Ignoring unknown camera config key '%s'", key)
                continue
            try:
                handler(self, value)
            except (TypeError, ValueError) as exc:
                logger.warning("Invalid value for '%s' (%r): %s", key, value, exc)
        return self


def _preview_handler(settings: CameraSettings, value: Any) -> None:
    if isinstance(value, bool):
        if value:
            settings.turn_on_preview()
        else:
            settings.turn_off_preview()
        return
    parts = [int(part) for part in str(value).split(",")]
    if len(parts) != 4:
        raise ValueError("preview window must be x,y,width,height")
    settings.turn_on_preview(*parts)


def _link_latest_handler(settings: CameraSettings, value: Any) -> None:
    if value is False or value in ("", None):
        settings.set_link_latest_image(False)
    else:
        settings.set_link_latest_image(True, str(value))


def _triple(value: Any) -> list[str]:
    parts = str(value).replace(":", ",").split(",")
    if len(parts) != 3:
        raise ValueError("expected three fields")
    return parts


def _thumbnail_handler(settings: CameraSettings, value: Any) -> None:
    if value is False or str(value).lower() == "none":
        settings.turn_off_thumbnail()
        return
    settings.set_thumbnail_params(*(int(part) for part in _triple(value)))


def _colour_effect_handler(settings: CameraSettings, value: Any) -> None:
    parts = str(value).replace(",", ":").split(":")
    if len(parts) != 2:
        raise ValueError("colour effect must be U:V")
    settings.set_colour_effect(int(parts[0]), int(parts[1]))


def _roi_handler(settings: CameraSettings, value: Any) -> None:
    parts = [float(part) for part in str(value).split(",")]
    if len(parts) != 4:
        raise ValueError("region of interest must be x,y,width,height")
    settings.set_region_of_interest(*parts)


_CONFIG_HANDLERS: Dict[str, Callable[[CameraSettings, Any], Any]] = {
    "width": CameraSettings.set_width,
    "height": CameraSettings.set_height,
    "quality": CameraSettings.set_quality,
    "sharpness": CameraSettings.set_sharpness,
    "contrast": CameraSettings.set_contrast,
    "brightness": CameraSettings.set_brightness,
    "saturation": CameraSettings.set_saturation,
    "iso": CameraSettings.set_iso,
    "exposure": CameraSettings.set_exposure,
    "awb": CameraSettings.set_awb,
    "image_effect": CameraSettings.set_image_effect,
    "colour_effect": _colour_effect_handler,
    "metering": CameraSettings.set_metering_mode,
    "drc": CameraSettings.set_drc,
    "rotation": CameraSettings.set_rotation,
    "hflip": CameraSettings.set_horizontal_flip,
    "vflip": CameraSettings.set_vertical_flip,
    "roi": _roi_handler,
    "shutter": CameraSettings.set_shutter,
    "timeout": CameraSettings.set_timeout,
    "encoding": CameraSettings.set_encoding,
    "camera": CameraSettings.select_camera,
    "preview": _preview_handler,
    "fullscreen": CameraSettings.set_preview_fullscreen,
    "full_preview": CameraSettings.set_full_preview,
    "opacity": CameraSettings.set_preview_opacity,
    "thumbnail": _thumbnail_handler,
    "raw_bayer": CameraSettings.set_add_raw_bayer,
    "burst": CameraSettings.set_burst,
    "datetime": CameraSettings.set_date_time,
    "timestamp": CameraSettings.set_timestamp,
    "link_latest": _link_latest_handler,
}


__all__ = [
    "CameraSettings",
    "HEIGHT_KEY",
    "LINK_LATEST_KEY",
    "WIDTH_KEY",
    "clamp",
    "normalize_rotation",
]
