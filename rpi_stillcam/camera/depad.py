"""Strip 16-pixel alignment padding from a streamed RGB frame.

raspiyuv rounds both frame dimensions up to a multiple of 16 and emits
``padded_height`` rows of ``padded_width`` RGB pixels. Only the first
``width`` pixels of the first ``height`` rows are image data; the rest is
padding with undefined content.

The stream is consumed in a single forward pass. Each row's valid bytes are
read straight into the output buffer and its padding bytes are read into a
small scratch buffer and dropped. Reading stops as soon as the last valid
byte has arrived, so trailing padding rows are never read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from rpi_stillcam.core.errors import RuntimeExecutionError, ShortReadError
from rpi_stillcam.core.logging_utils import get_module_logger

from .process import ByteSource

logger = get_module_logger("PixelDepadder")

ALIGNMENT = 16
BYTES_PER_PIXEL = 3


def pad_to_alignment(value: int, alignment: int = ALIGNMENT) -> int:
    """Round ``value`` up to the next multiple of ``alignment``."""
    return value + ((alignment - value % alignment) % alignment)


@dataclass(frozen=True)
class PaddingGeometry:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Frame size must not be negative: {self.width}x{self.height}")

    @property
    def padded_width(self) -> int:
        return pad_to_alignment(self.width)

    @property
    def padded_height(self) -> int:
        return pad_to_alignment(self.height)

    @property
    def row_bytes(self) -> int:
        return self.width * BYTES_PER_PIXEL

    @property
    def padded_row_bytes(self) -> int:
        return self.padded_width * BYTES_PER_PIXEL

    @property
    def frame_bytes(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL

    @property
    def padded_frame_bytes(self) -> int:
        return self.padded_width * self.padded_height * BYTES_PER_PIXEL

    @property
    def has_padding(self) -> bool:
        return self.padded_width != self.width or self.padded_height != self.height


@dataclass(frozen=True)
class PixelBuffer:
    """Flat RGB bytes of one captured frame.

    ``data`` holds ``columns * rows * 3`` uint8 values, where the columns and
    rows are the padded dimensions when ``padded`` is set and the requested
    ones otherwise.
    """

    data: np.ndarray
    geometry: PaddingGeometry
    padded: bool = False

    @property
    def width(self) -> int:
        return self.geometry.padded_width if self.padded else self.geometry.width

    @property
    def height(self) -> int:
        return self.geometry.padded_height if self.padded else self.geometry.height

    def __len__(self) -> int:
        return int(self.data.size)

    def tobytes(self) -> bytes:
        return self.data.tobytes()

    def as_array(self) -> np.ndarray:
        """View as a ``(rows, columns, 3)`` array without copying."""
        return self.data.reshape((self.height, self.width, BYTES_PER_PIXEL))

    def cropped(self) -> "PixelBuffer":
        """Return the valid region only; a no-op on an already depadded buffer."""
        if not self.padded:
            return self
        region = self.as_array()[: self.geometry.height, : self.geometry.width]
        return PixelBuffer(np.ascontiguousarray(region).reshape(-1), self.geometry, padded=False)

    def to_image(self):
        """Return a Pillow RGB image of the buffer (padding included if kept)."""
        from PIL import Image

        return Image.fromarray(np.ascontiguousarray(self.as_array()))


def _read_into(source: ByteSource, view: memoryview) -> int:
    """Fill ``view`` from ``source``; return how many bytes were written before EOF."""
    filled = 0
    total = len(view)
    while filled < total:
        try:
            chunk = source.read(total - filled)
        except OSError as exc:
            raise RuntimeExecutionError(f"Reading pixel stream failed: {exc}") from exc
        if not chunk:
            break
        view[filled:filled + len(chunk)] = chunk
        filled += len(chunk)
    return filled


def depad_stream(
    source: ByteSource,
    width: int,
    height: int,
    keep_padding: bool = False,
) -> PixelBuffer:
    """Read one raw RGB frame from ``source`` and return it as a :class:`PixelBuffer`.

    With ``keep_padding`` the padded frame is copied verbatim. Otherwise only
    the valid ``width x height`` region is kept and reading stops at its last
    byte.

    Raises:
        ShortReadError: The stream ended before the frame was complete.
        RuntimeExecutionError: The source raised while being read.
    """
    geometry = PaddingGeometry(int(width), int(height))

    if keep_padding:
        output = np.empty(geometry.padded_frame_bytes, dtype=np.uint8)
        captured = _read_into(source, memoryview(output))
        if captured < geometry.padded_frame_bytes:
            logger.warning(
                "Pixel stream closed early (%d of %d padded bytes)",
                captured, geometry.padded_frame_bytes,
            )
            raise ShortReadError(captured, geometry.padded_frame_bytes)
        logger.debug("Captured %d padded bytes (%dx%d)",
                     captured, geometry.padded_width, geometry.padded_height)
        return PixelBuffer(output, geometry, padded=True)

    output = np.empty(geometry.frame_bytes, dtype=np.uint8)
    out_view = memoryview(output)
    row_bytes = geometry.row_bytes
    skip_bytes = geometry.padded_row_bytes - row_bytes
    scratch: Optional[memoryview] = memoryview(bytearray(skip_bytes)) if skip_bytes else None

    captured = 0
    consumed = 0
    for row in range(geometry.height):
        got = _read_into(source, out_view[captured:captured + row_bytes])
        captured += got
        consumed += got
        if got < row_bytes:
            _raise_short(captured, geometry.frame_bytes, consumed)

        # The padding after the final valid row is never read.
        if scratch is not None and row < geometry.height - 1:
            skipped = _read_into(source, scratch)
            consumed += skipped
            if skipped < skip_bytes:
                _raise_short(captured, geometry.frame_bytes, consumed)

    logger.debug("Captured %d bytes (%dx%d) after reading %d",
                 captured, geometry.width, geometry.height, consumed)
    return PixelBuffer(output, geometry, padded=False)


def _raise_short(captured: int, expected: int, consumed: int) -> None:
    logger.warning("Pixel stream closed early (%d of %d bytes, %d read)", captured, expected, consumed)
    raise ShortReadError(captured, expected, consumed)


__all__ = [
    "ALIGNMENT",
    "PaddingGeometry",
    "PixelBuffer",
    "depad_stream",
    "pad_to_alignment",
]
