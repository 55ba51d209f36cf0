"""Unit tests for the structured logging helpers."""

import contextlib
import logging

from rpi_stillcam.core.logging_config import configure_logging
from rpi_stillcam.core.logging_utils import (
    StructuredLogger,
    ensure_structured_logger,
    get_module_logger,
)


def test_module_logger_is_namespaced():
    logger = get_module_logger("PixelDepadder")
    assert logger.name == "rpi_stillcam.PixelDepadder"
    assert logger.component == "PixelDepadder"
    assert get_module_logger("rpi_stillcam.cli").name == "rpi_stillcam.cli"
    assert get_module_logger().component == "Core"


def test_messages_are_prefixed_with_component(caplog):
    logger = get_module_logger("ProcessRunner")
    with caplog.at_level(logging.DEBUG, logger="rpi_stillcam"):
        logger.info("Started %s (pid %d)", "raspistill", 42)
    assert caplog.messages == ["[ProcessRunner] Started raspistill (pid 42)"]


def test_bad_format_args_do_not_raise(caplog):
    logger = get_module_logger("CLI")
    with caplog.at_level(logging.DEBUG, logger="rpi_stillcam"):
        logger.warning("value %d", "not-a-number")
    assert "args=not-a-number" in caplog.messages[0]


def test_ensure_structured_logger():
    plain = logging.getLogger("somewhere")
    wrapped = ensure_structured_logger(plain, fallback_name="Unused")
    assert isinstance(wrapped, StructuredLogger)
    assert wrapped.component == "somewhere"
    assert ensure_structured_logger(wrapped, fallback_name="Unused") is wrapped
    assert ensure_structured_logger(None, fallback_name="Fallback").component == "Fallback"


@contextlib.contextmanager
def restored_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        yield root
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "stillcam.log"
    with restored_root_logger() as root:
        configure_logging(logging.DEBUG, log_file=log_file)
        get_module_logger("Test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "[Test] hello file" in log_file.read_text()


def test_configure_logging_uses_stderr_and_replaces_handlers(capsys):
    with restored_root_logger() as root:
        configure_logging(logging.INFO)
        configure_logging(logging.WARNING)
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        get_module_logger("Test").warning("to stderr")
        captured = capsys.readouterr()
    assert captured.out == ""
    assert "[Test] to stderr" in captured.err
