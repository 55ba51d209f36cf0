"""Start, watch and stop the external capture program."""

from __future__ import annotations

import os
import queue
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Optional, Protocol, Union

from rpi_stillcam.core.errors import LaunchError, RuntimeExecutionError
from rpi_stillcam.core.logging_utils import get_module_logger

from .command import CommandSpec

logger = get_module_logger("ProcessRunner")

_CHUNK_SIZE = 64 * 1024
_TERMINATE_TIMEOUT = 2.0
_PUMP_JOIN_TIMEOUT = 2.0


class ByteSource(Protocol):
    """Anything with a blocking ``read(size)`` that returns ``b""`` at end of stream."""

    def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class ExitStatus:
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def signaled(self) -> bool:
        """True when the process was ended by a signal (POSIX negative codes)."""
        return self.returncode < 0


class PipePump(threading.Thread):
    """Drain a child's stdout on a background thread.

    The child never blocks on a full OS pipe buffer however slowly the
    consumer reads. Readers see the pump through :meth:`read`, which blocks
    until data arrives or the pipe closes.
    """

    _EOF = object()

    def __init__(self, pipe: IO[bytes], name: str = "stillcam-pipe") -> None:
        super().__init__(name=name, daemon=True)
        self._pipe = pipe
        self._chunks: "queue.Queue[Union[bytes, BaseException, object]]" = queue.Queue()
        self._pending = bytearray()
        self._finished = False
        self._error: Optional[BaseException] = None
        self.bytes_pumped = 0

    def run(self) -> None:
        reader = getattr(self._pipe, "read1", self._pipe.read)
        try:
            while True:
                chunk = reader(_CHUNK_SIZE)
                if not chunk:
                    break
                self.bytes_pumped += len(chunk)
                self._chunks.put(bytes(chunk))
        except OSError as exc:
            self._chunks.put(exc)
        finally:
            self._chunks.put(self._EOF)
            try:
                self._pipe.close()
            except OSError:
                pass

    def _take(self) -> bool:
        """Move one queued item into the pending buffer; False once the stream is over."""
        if self._finished:
            return False
        item = self._chunks.get()
        if item is self._EOF:
            self._finished = True
            return False
        if isinstance(item, BaseException):
            self._error = item
            return True
        self._pending += item
        return True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            while self._take():
                self._raise_pending_error()
            self._raise_pending_error()
            data = bytes(self._pending)
            self._pending.clear()
            return data

        while not self._pending and self._take():
            self._raise_pending_error()
        self._raise_pending_error()
        data = bytes(self._pending[:size])
        del self._pending[:size]
        return data

    def _raise_pending_error(self) -> None:
        if self._error is not None:
            error, self._error = self._error, None
            raise RuntimeExecutionError(f"Reading capture output failed: {error}") from error


class CaptureHandle:
    """Owns one spawned capture process and, optionally, its output pump."""

    def __init__(
        self,
        command: CommandSpec,
        process: subprocess.Popen,
        pump: Optional[PipePump] = None,
    ) -> None:
        self.command = command
        self._process: Optional[subprocess.Popen] = process
        self._pump = pump
        self._exit_status: Optional[ExitStatus] = None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def stdout(self) -> ByteSource:
        if self._pump is None:
            raise RuntimeExecutionError(f"{self.command.program} was not started with a readable output")
        return self._pump

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    @property
    def exit_status(self) -> Optional[ExitStatus]:
        if self._exit_status is None and self._process is not None:
            returncode = self._process.poll()
            if returncode is not None:
                self._exit_status = ExitStatus(returncode)
        return self._exit_status

    def __repr__(self) -> str:
        return f"CaptureHandle(program={self.command.program!r}, pid={self.pid}, running={self.running})"


class ProcessRunner:
    """Launch capture commands; one child process per call, never reused."""

    def start(
        self,
        spec: CommandSpec,
        *,
        capture_output: bool = False,
        cwd: Optional[Union[str, os.PathLike]] = None,
    ) -> CaptureHandle:
        """Spawn ``spec``. With ``capture_output`` the child's stdout is pumped for reading.

        Raises:
            LaunchError: The program is missing, not executable, or the OS refused to spawn it.
        """
        logger.debug("Executing: %s", spec)
        try:
            process = subprocess.Popen(
                list(spec.tokens),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if capture_output else None,
                cwd=cwd,
            )
        except OSError as exc:
            logger.error("Could not start %s: %s", spec.program, exc)
            raise LaunchError(
                spec.program,
                f"Failed to run {spec.program!r}; ensure it is installed and executable ({exc})",
            ) from exc

        pump = None
        if capture_output:
            pump = PipePump(process.stdout, name=f"{spec.program}-{process.pid}-stdout")
            pump.start()

        logger.info("Started %s (pid %d)", spec.program, process.pid)
        return CaptureHandle(spec, process, pump)

    def wait_for_exit(self, handle: CaptureHandle) -> ExitStatus:
        """Block until the process has terminated and return its status."""
        process = handle._process
        if process is None:
            raise RuntimeExecutionError("Capture handle has no process")
        returncode = process.wait()
        if handle._pump is not None:
            handle._pump.join(timeout=_PUMP_JOIN_TIMEOUT)
        status = ExitStatus(returncode)
        handle._exit_status = status
        if status.ok:
            logger.debug("%s exited normally", handle.command.program)
        else:
            logger.warning("%s exited with status %d", handle.command.program, returncode)
        return status

    def stop(self, handle: Optional[CaptureHandle]) -> None:
        """Best-effort termination; safe to call repeatedly or after natural exit."""
        if handle is None or handle._process is None:
            return
        process = handle._process
        if process.poll() is None:
            logger.info("Stopping %s (pid %d)", handle.command.program, process.pid)
            process.terminate()
            try:
                process.wait(timeout=_TERMINATE_TIMEOUT)
            except subprocess.TimeoutExpired:
                logger.warning("%s ignored SIGTERM; killing", handle.command.program)
                process.kill()
                process.wait()
        if handle._pump is not None:
            handle._pump.join(timeout=_PUMP_JOIN_TIMEOUT)
        handle._exit_status = ExitStatus(process.returncode)


__all__ = ["ByteSource", "CaptureHandle", "ExitStatus", "PipePump", "ProcessRunner"]
