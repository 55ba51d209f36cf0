from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np

from rpi_stillcam.camera import AWB, DRC, Encoding, Exposure, StillCamera
from rpi_stillcam.camera.process import ExitStatus
from rpi_stillcam.core.errors import ConfigurationError, LaunchError, StillCamError
from rpi_stillcam.core.logging_config import configure_logging
from rpi_stillcam.core.logging_utils import get_module_logger
from rpi_stillcam.core.paths import DEFAULT_SAVE_DIR

logger = get_module_logger("CLI")

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

EXIT_CONFIGURATION = 2
EXIT_LAUNCH = 3
EXIT_CAPTURE = 4


def _positive_number(value: str, typ: type, name: str):
    try:
        parsed = typ(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Value must be a {name}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def positive_int(value: str) -> int:
    return _positive_number(value, int, "integer")


def parse_resolution(value: str) -> Tuple[int, int]:
    """Parse ``WIDTHxHEIGHT``."""
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Resolution must look like 1024x768") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("Resolution must be positive")
    return width, height


def _choices(enum_type) -> list[str]:
    return [member.value for member in enum_type]


def add_common_cli_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help=f"Directory captures are written to (default {DEFAULT_SAVE_DIR})",
    )
    parser.add_argument(
        "--resolution",
        type=parse_resolution,
        default=None,
        help="Capture size as WIDTHxHEIGHT (overrides the config file)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional key = value camera configuration file",
    )
    parser.add_argument("--awb", choices=_choices(AWB), default=None, help="Auto white balance mode")
    parser.add_argument("--drc", choices=_choices(DRC), default=None, help="Dynamic range compression")
    parser.add_argument("--exposure", choices=_choices(Exposure), default=None, help="Exposure mode")
    parser.add_argument("--encoding", choices=_choices(Encoding), default=None, help="Output encoding")
    parser.add_argument("--quality", type=int, default=None, help="JPEG quality (0-100)")
    parser.add_argument("--rotation", type=int, default=None, help="Rotation in degrees")
    parser.add_argument("--no-preview", action="store_true", help="Disable the preview window")
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default="info",
        help="Logging verbosity",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to write logs to",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpi-stillcam",
        description="Capture stills, raw RGB frames and timelapses with raspistill/raspiyuv",
    )
    add_common_cli_arguments(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    still = commands.add_parser("still", help="Capture one image into the save directory")
    still.add_argument("name", help="File name of the image")

    buffered = commands.add_parser("buffered", help="Capture one image through stdout")
    buffered.add_argument("output", help="Destination file, or - for stdout")

    rgb = commands.add_parser("rgb", help="Capture one raw RGB frame")
    rgb.add_argument("output", type=Path, help="Destination (.npy keeps raw values, other suffixes use Pillow)")
    rgb.add_argument("--keep-padding", action="store_true", help="Keep 16-pixel alignment padding")

    timelapse = commands.add_parser("timelapse", help="Capture a timelapse")
    timelapse.add_argument("name", help="Frame file name; %%04d is prepended when missing")
    timelapse.add_argument("--interval", type=positive_int, required=True, help="Milliseconds between frames")
    timelapse.add_argument("--timeout", type=positive_int, default=None, help="Total duration in milliseconds")
    timelapse.add_argument("--link", default=None, help="Keep this file updated with the latest frame")
    timelapse.add_argument("--no-wait", action="store_true", help="Return as soon as raspistill starts")
    return parser


def camera_from_args(args: argparse.Namespace) -> StillCamera:
    camera = StillCamera.from_config(args.config) if args.config else StillCamera()
    if args.save_dir is not None:
        camera.set_save_dir(args.save_dir)
    if args.resolution is not None:
        camera.set_width(args.resolution[0]).set_height(args.resolution[1])
    if args.awb:
        camera.set_awb(args.awb)
    if args.drc:
        camera.set_drc(args.drc)
    if args.exposure:
        camera.set_exposure(args.exposure)
    if args.encoding:
        camera.set_encoding(args.encoding)
    if args.quality is not None:
        camera.set_quality(args.quality)
    if args.rotation is not None:
        camera.set_rotation(args.rotation)
    if args.no_preview:
        camera.turn_off_preview()
    return camera


def _status_code(status: ExitStatus) -> int:
    return status.returncode if status.returncode >= 0 else 1


def _write_bytes(output: str, data: bytes) -> None:
    if output == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        Path(output).write_bytes(data)


def run_command(camera: StillCamera, args: argparse.Namespace) -> int:
    if args.command == "still":
        result = camera.take_still(args.name)
        return _status_code(result.status)

    if args.command == "buffered":
        result = camera.take_buffered_still()
        _write_bytes(args.output, result.data or b"")
        return _status_code(result.status)

    if args.command == "rgb":
        pixels = camera.take_still_as_rgb(keep_padding=args.keep_padding)
        if args.output.suffix.lower() == ".npy":
            np.save(args.output, pixels.as_array())
        else:
            pixels.to_image().save(args.output)
        logger.info("Wrote %dx%d frame to %s", pixels.width, pixels.height, args.output)
        return 0

    if args.timeout is not None:
        camera.set_timeout(args.timeout)
    if args.link:
        camera.set_link_latest_image(True, args.link)
    result = camera.timelapse(args.name, args.interval, wait=not args.no_wait)
    if result.latest_image is not None:
        print(result.latest_image)
    if result.status is None:
        logger.info("Timelapse running in the background (pid %s)", result.handle.pid)
        return 0
    return _status_code(result.status)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(LOG_LEVELS[args.log_level], log_file=args.log_file)

    try:
        camera = camera_from_args(args)
        return run_command(camera, args)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except LaunchError as exc:
        logger.error("%s", exc)
        return EXIT_LAUNCH
    except StillCamError as exc:
        logger.error("Capture failed: %s", exc)
        return EXIT_CAPTURE


__all__ = ["build_parser", "camera_from_args", "main", "parse_resolution", "run_command"]
