"""Test helpers for the rpi-stillcam test suite.

Usage:
    from tests.infrastructure.helpers import make_padded_frame, expected_pixels
    from tests.infrastructure.mocks import TrickleSource, FakeRunner
"""

from tests.infrastructure.helpers.generators import (
    PADDING_SENTINEL,
    expected_pixels,
    make_padded_frame,
    pattern_byte,
)

__all__ = [
    "PADDING_SENTINEL",
    "expected_pixels",
    "make_padded_frame",
    "pattern_byte",
]
