"""Unit tests for ProcessRunner using short-lived Python child processes."""

import io
import sys
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from rpi_stillcam.camera.command import CommandSpec
from rpi_stillcam.camera.depad import depad_stream
from rpi_stillcam.camera.process import ExitStatus, PipePump, ProcessRunner
from rpi_stillcam.core.errors import LaunchError, RuntimeExecutionError
from tests.infrastructure.helpers import expected_pixels, make_padded_frame

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX process semantics")


def python_command(code: str) -> CommandSpec:
    return CommandSpec((sys.executable, "-c", code))


@pytest.fixture
def runner():
    return ProcessRunner()


class TestStartAndWait:

    def test_exit_status_is_reported_not_raised(self, runner):
        handle = runner.start(python_command("import sys; sys.exit(3)"))
        status = runner.wait_for_exit(handle)
        assert status == ExitStatus(3)
        assert not status.ok
        assert not handle.running
        assert handle.exit_status == status

    def test_zero_exit_is_ok(self, runner):
        status = runner.wait_for_exit(runner.start(python_command("pass")))
        assert status.ok

    def test_missing_program_raises_launch_error(self, runner):
        spec = CommandSpec(("rpi-stillcam-no-such-program-xyz", "-o", "a.jpg"))
        with pytest.raises(LaunchError) as excinfo:
            runner.start(spec)
        assert excinfo.value.program == "rpi-stillcam-no-such-program-xyz"
        assert isinstance(excinfo.value.__cause__, OSError)

    def test_non_executable_file_raises_launch_error(self, runner, tmp_path):
        script = tmp_path / "not_executable"
        script.write_text("#!/bin/sh\nexit 0\n")
        with pytest.raises(LaunchError):
            runner.start(CommandSpec((str(script),)))

    def test_popen_os_error_is_wrapped(self, runner):
        with patch("rpi_stillcam.camera.process.subprocess.Popen", side_effect=PermissionError("denied")):
            with pytest.raises(LaunchError):
                runner.start(CommandSpec(("raspistill",)))

    def test_wait_returns_only_after_exit(self, runner):
        handle = runner.start(python_command("import time; time.sleep(0.2)"))
        started = time.monotonic()
        runner.wait_for_exit(handle)
        assert time.monotonic() - started >= 0.1
        assert handle.exit_status is not None

    def test_cwd_is_passed_to_child(self, runner, tmp_path):
        handle = runner.start(
            python_command("import os, sys; sys.stdout.write(os.getcwd())"),
            capture_output=True,
            cwd=tmp_path,
        )
        output = handle.stdout.read()
        runner.wait_for_exit(handle)
        assert Path(output.decode()).resolve() == tmp_path.resolve()


class TestStop:

    def test_stop_terminates_running_process(self, runner):
        handle = runner.start(python_command("import time; time.sleep(30)"))
        assert handle.running
        runner.stop(handle)
        assert not handle.running
        assert handle.exit_status is not None
        assert handle.exit_status.signaled

    def test_stop_is_idempotent(self, runner):
        handle = runner.start(python_command("pass"))
        runner.wait_for_exit(handle)
        runner.stop(handle)
        runner.stop(handle)
        runner.stop(None)
        assert handle.exit_status.ok

    def test_stdout_requires_capture(self, runner):
        handle = runner.start(python_command("pass"))
        runner.wait_for_exit(handle)
        with pytest.raises(RuntimeExecutionError):
            handle.stdout


class TestOutputPump:

    def test_reads_child_output(self, runner):
        handle = runner.start(
            python_command("import sys; sys.stdout.buffer.write(b'abc' * 1000)"),
            capture_output=True,
        )
        data = handle.stdout.read()
        runner.wait_for_exit(handle)
        assert data == b"abc" * 1000

    def test_large_output_does_not_block_child(self, runner):
        # Far more than an OS pipe buffer; the child must finish before we read.
        size = 4 * 1024 * 1024
        handle = runner.start(
            python_command(f"import sys; sys.stdout.buffer.write(b'x' * {size})"),
            capture_output=True,
        )
        status = runner.wait_for_exit(handle)
        assert status.ok
        assert len(handle.stdout.read()) == size

    def test_depad_from_child_process(self, runner, tmp_path):
        frame = tmp_path / "frame.rgb"
        frame.write_bytes(make_padded_frame(20, 10))
        handle = runner.start(
            python_command(f"import sys; sys.stdout.buffer.write(open({str(frame)!r}, 'rb').read())"),
            capture_output=True,
        )
        try:
            pixels = depad_stream(handle.stdout, 20, 10)
        finally:
            runner.stop(handle)
        assert pixels.tobytes() == expected_pixels(20, 10)

    def test_eof_after_child_exit(self, runner):
        handle = runner.start(python_command("import sys; sys.stdout.buffer.write(b'12345')"),
                              capture_output=True)
        received = b""
        while True:
            chunk = handle.stdout.read(2)
            if not chunk:
                break
            assert len(chunk) <= 2
            received += chunk
        assert received == b"12345"
        assert handle.stdout.read(10) == b""
        runner.wait_for_exit(handle)


class _BrokenPipe(io.RawIOBase):

    def __init__(self, first: bytes) -> None:
        self._first = first

    def readable(self) -> bool:
        return True

    def read(self, size=-1):
        if self._first:
            data, self._first = self._first, b""
            return data
        raise OSError("I/O error")


class TestPipePump:

    def test_read_error_becomes_runtime_execution_error(self):
        pump = PipePump(_BrokenPipe(b"ok"))
        pump.start()
        assert pump.read(2) == b"ok"
        with pytest.raises(RuntimeExecutionError):
            pump.read(10)
        pump.join(timeout=1)

    def test_read_all(self):
        pump = PipePump(io.BytesIO(b"abcdef"))
        pump.start()
        assert pump.read() == b"abcdef"
        assert pump.read(1) == b""
        assert pump.bytes_pumped == 6
