"""Unit tests for the rpi-stillcam command line."""

import argparse
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest

from rpi_stillcam import cli
from rpi_stillcam.camera import StillCamera
from rpi_stillcam.core.errors import LaunchError
from tests.infrastructure.helpers import make_padded_frame
from tests.infrastructure.mocks.capture_mocks import FakeRunner


@pytest.fixture
def fake_camera(tmp_path):
    runner = FakeRunner()
    camera = StillCamera(tmp_path, runner=runner)
    with patch.object(cli, "camera_from_args", return_value=camera):
        with patch.object(cli, "configure_logging"):
            yield camera, runner


class TestParser:

    def test_parse_resolution(self):
        assert cli.parse_resolution("1024x768") == (1024, 768)
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_resolution("big")
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_resolution("0x10")

    def test_camera_from_args_applies_overrides(self, tmp_path):
        args = cli.build_parser().parse_args([
            "--save-dir", str(tmp_path), "--resolution", "64x48", "--awb", "sun",
            "--rotation", "450", "--no-preview", "still", "a.jpg",
        ])
        camera = cli.camera_from_args(args)
        assert camera.save_dir == tmp_path
        assert camera.options.tokens("width") == ("-w", "64")
        assert camera.options.tokens("awb") == ("-awb", "sun")
        assert camera.options.tokens("rotation") == ("-rot", "90")
        assert camera.options.tokens("preview") == ("-n",)

    def test_timelapse_requires_interval(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["timelapse", "t.jpg"])


class TestMain:

    def test_still_returns_program_status(self, fake_camera):
        camera, runner = fake_camera
        runner.returncode = 5
        assert cli.main(["still", "a.jpg"]) == 5
        assert runner.started[0].program == "raspistill"

    def test_rgb_writes_npy(self, fake_camera, tmp_path):
        camera, runner = fake_camera
        camera.set_width(20).set_height(10)
        runner.payload = make_padded_frame(20, 10)
        output = tmp_path / "frame.npy"
        assert cli.main(["rgb", str(output)]) == 0
        assert np.load(output).shape == (10, 20, 3)

    def test_rgb_writes_image(self, fake_camera, tmp_path):
        camera, runner = fake_camera
        camera.set_width(20).set_height(10)
        runner.payload = make_padded_frame(20, 10)
        output = tmp_path / "frame.png"
        assert cli.main(["rgb", str(output)]) == 0
        assert output.stat().st_size > 0

    def test_buffered_writes_file(self, fake_camera, tmp_path):
        _, runner = fake_camera
        runner.payload = b"encoded"
        output = tmp_path / "still.jpg"
        assert cli.main(["buffered", str(output)]) == 0
        assert output.read_bytes() == b"encoded"

    def test_timelapse_prints_latest_path(self, fake_camera, tmp_path, capsys):
        _, runner = fake_camera
        code = cli.main(["timelapse", "t.jpg", "--interval", "1000", "--link", "latest.jpg",
                         "--timeout", "5000"])
        assert code == 0
        assert capsys.readouterr().out.strip() == str(tmp_path / "latest.jpg")
        assert runner.waited

    def test_background_timelapse_does_not_wait(self, fake_camera):
        _, runner = fake_camera
        assert cli.main(["timelapse", "t.jpg", "--interval", "1000", "--no-wait"]) == 0
        assert runner.waited == []

    def test_errors_map_to_exit_codes(self, fake_camera):
        camera, runner = fake_camera
        with patch.object(runner, "start", side_effect=LaunchError("raspistill")):
            assert cli.main(["still", "a.jpg"]) == cli.EXIT_LAUNCH
        camera.options.disable("width")
        assert cli.main(["still", "a.jpg"]) == cli.EXIT_CONFIGURATION
        runner.payload = b"\x00" * 10
        camera.set_width(16)
        assert cli.main(["rgb", "out.npy"]) == cli.EXIT_CAPTURE
