"""High level still, raw RGB and timelapse capture through raspistill/raspiyuv."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from rpi_stillcam.core.config_loader import ConfigLoader
from rpi_stillcam.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_stillcam.core.paths import DEFAULT_SAVE_DIR

from .command import STDOUT_DESTINATION, CaptureMode, CommandBuilder, CommandSpec
from .depad import PixelBuffer, depad_stream
from .link import resolve_link_path
from .options import OptionTable
from .process import CaptureHandle, ExitStatus, ProcessRunner
from .settings import CameraSettings

DEFAULT_WIDTH = 500
DEFAULT_HEIGHT = 500


@dataclass(frozen=True)
class StillResult:
    status: ExitStatus
    path: Optional[Path] = None
    data: Optional[bytes] = None


@dataclass(frozen=True)
class TimelapseResult:
    handle: CaptureHandle
    latest_image: Optional[Path] = None
    status: Optional[ExitStatus] = None


class StillCamera(CameraSettings):
    """Configure once, then capture repeatedly.

    The camera owns its option table; each capture builds a fresh command
    from it and runs a new process. Instances are not thread-safe: do not
    change settings while another thread is capturing with the same camera.

    Example:
        >>> camera = StillCamera("/home/pi/Pictures").set_awb("auto").set_drc("off")
        >>> camera.take_still("garden.jpg", 1024, 768).path
        PosixPath('/home/pi/Pictures/garden.jpg')
    """

    def __init__(
        self,
        save_dir: Union[str, Path] = DEFAULT_SAVE_DIR,
        *,
        options: Optional[OptionTable] = None,
        runner: Optional[ProcessRunner] = None,
        logger: LoggerLike = None,
    ) -> None:
        fresh = options is None
        super().__init__(options)
        self.save_dir = Path(save_dir)
        self.runner = runner or ProcessRunner()
        self.builder = CommandBuilder(self.options)
        self.logger = ensure_structured_logger(logger, fallback_name="StillCamera")
        self.previous_command: Optional[CommandSpec] = None
        self._handle: Optional[CaptureHandle] = None
        if fresh:
            self.set_width(DEFAULT_WIDTH).set_height(DEFAULT_HEIGHT)

    # ------------------------------------------------------------------
    # Configuration

    @classmethod
    def from_config(cls, config_path: Union[str, Path], **kwargs: Any) -> "StillCamera":
        camera = cls(**kwargs)
        camera.apply_config(ConfigLoader.load(Path(config_path)))
        return camera

    def apply_config(self, config: Mapping[str, Any]) -> "StillCamera":
        remaining = dict(config)
        save_dir = remaining.pop("save_dir", None)
        if save_dir:
            self.set_save_dir(save_dir)
        return super().apply_config(remaining)

    def set_save_dir(self, save_dir: Union[str, Path]) -> "StillCamera":
        self.save_dir = Path(save_dir)
        return self

    def set_to_defaults(self) -> "StillCamera":
        """Disable every stored option and restore the default size and save directory."""
        self.options.disable_all()
        self.save_dir = DEFAULT_SAVE_DIR
        return self.set_width(DEFAULT_WIDTH).set_height(DEFAULT_HEIGHT)

    @property
    def latest_image(self) -> Optional[Path]:
        return resolve_link_path(self.options, self.save_dir)

    # ------------------------------------------------------------------
    # Capture

    def _launch(self, spec: CommandSpec, **kwargs: Any) -> CaptureHandle:
        self.previous_command = spec
        self._handle = self.runner.start(spec, **kwargs)
        return self._handle

    def take_still(
        self,
        picture_name: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> StillResult:
        """Capture one image into ``save_dir/picture_name`` and wait for raspistill to exit."""
        destination = self.save_dir / picture_name
        spec = self.builder.build(CaptureMode.STILL, str(destination), width, height)
        handle = self._launch(spec)
        status = self.runner.wait_for_exit(handle)
        self.logger.info("Still saved to %s (status %d)", destination, status.returncode)
        return StillResult(status=status, path=destination)

    def take_buffered_still(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> StillResult:
        """Capture one image to stdout and return its encoded bytes unchanged."""
        spec = self.builder.build(CaptureMode.STILL, STDOUT_DESTINATION, width, height)
        handle = self._launch(spec, capture_output=True)
        try:
            data = handle.stdout.read()
        finally:
            status = self.runner.wait_for_exit(handle)
        self.logger.info("Buffered still captured (%d bytes, status %d)", len(data), status.returncode)
        return StillResult(status=status, data=data)

    def take_still_as_rgb(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        keep_padding: bool = False,
    ) -> PixelBuffer:
        """Capture one frame as raw RGB through raspiyuv."""
        spec = self.builder.build(CaptureMode.RAW, None, width, height)
        frame_width, frame_height = self.builder.dimensions(width, height)
        handle = self._launch(spec, capture_output=True)
        try:
            pixels = depad_stream(handle.stdout, frame_width, frame_height, keep_padding)
        finally:
            self.runner.stop(handle)
        self.logger.info("RGB frame captured (%dx%d, %d bytes)", pixels.width, pixels.height, len(pixels))
        return pixels

    def timelapse(self, picture_name: str, interval_ms: int, *, wait: bool = False) -> TimelapseResult:
        """Start a timelapse writing ``save_dir/%04d<picture_name>`` frames.

        Without ``wait`` the call returns as soon as raspistill is running;
        keep the returned handle to stop it. The total run time comes from
        :meth:`set_timeout`.
        """
        destination = self.save_dir / picture_name
        spec = self.builder.build(CaptureMode.TIMELAPSE, str(destination), interval_ms=interval_ms)
        cwd = self.save_dir if self.save_dir.is_dir() else None
        handle = self._launch(spec, cwd=cwd)
        status = self.runner.wait_for_exit(handle) if wait else None
        latest = self.latest_image
        if latest is not None:
            self.logger.info("Timelapse linking latest frame to %s", latest)
        return TimelapseResult(handle=handle, latest_image=latest, status=status)

    def stop(self, handle: Optional[CaptureHandle] = None) -> None:
        """Stop ``handle`` or, by default, the most recently started capture."""
        self.runner.stop(handle if handle is not None else self._handle)

    # ------------------------------------------------------------------
    # Async wrappers

    async def take_still_async(self, picture_name: str, width: Optional[int] = None,
                               height: Optional[int] = None) -> StillResult:
        return await asyncio.to_thread(self.take_still, picture_name, width, height)

    async def take_buffered_still_async(self, width: Optional[int] = None,
                                        height: Optional[int] = None) -> StillResult:
        return await asyncio.to_thread(self.take_buffered_still, width, height)

    async def take_still_as_rgb_async(self, width: Optional[int] = None, height: Optional[int] = None,
                                      keep_padding: bool = False) -> PixelBuffer:
        return await asyncio.to_thread(self.take_still_as_rgb, width, height, keep_padding)

    async def timelapse_async(self, picture_name: str, interval_ms: int, *,
                              wait: bool = False) -> TimelapseResult:
        return await asyncio.to_thread(self.timelapse, picture_name, interval_ms, wait=wait)


__all__ = ["StillCamera", "StillResult", "TimelapseResult"]
