"""Unit test fixtures.

Nothing here starts raspistill or raspiyuv. Tests that need a live child
process spawn ``sys.executable`` instead.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from rpi_stillcam.camera import OptionTable, StillCamera
from tests.infrastructure.mocks.capture_mocks import FakeRunner


@pytest.fixture
def options() -> OptionTable:
    return OptionTable()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def camera(tmp_path: Path, fake_runner: FakeRunner) -> StillCamera:
    """A StillCamera saving into tmp_path and driving a FakeRunner."""
    return StillCamera(tmp_path, runner=fake_runner)
