"""Cross-cutting plumbing shared by the camera package and the CLI."""

from .config_loader import ConfigLoader
from .errors import (
    ConfigurationError,
    LaunchError,
    RuntimeExecutionError,
    ShortReadError,
    StillCamError,
)
from .logging_config import configure_logging
from .logging_utils import StructuredLogger, get_module_logger

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "LaunchError",
    "RuntimeExecutionError",
    "ShortReadError",
    "StillCamError",
    "StructuredLogger",
    "configure_logging",
    "get_module_logger",
]
