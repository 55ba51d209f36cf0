import asyncio
from pathlib import Path
from typing import Any, Dict

from rpi_stillcam.core.logging_utils import get_module_logger

logger = get_module_logger("ConfigLoader")


class ConfigLoader:
    """Reader for ``key = value`` camera configuration files.

    Blank lines and ``#`` comments are skipped, trailing comments are
    stripped, and matching quotes around a value are removed. Values are
    guessed as bool, int, float, then str. Read failures are logged and an
    empty mapping is returned.
    """

    @staticmethod
    async def load_async(config_path: Path) -> Dict[str, Any]:
        return await asyncio.to_thread(ConfigLoader.load, config_path)

    @staticmethod
    def load(config_path: Path) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning("Config file not found at %s", config_path)
            return config

        logger.debug("Loading config from: %s", config_path)

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()

                    if not line or line.startswith('#'):
                        continue

                    if '=' not in line:
                        logger.warning(
                            "Invalid config line %d (missing '='): %s",
                            line_num, line
                        )
                        continue

                    key, value = line.split('=', 1)
                    config[key.strip()] = ConfigLoader._parse_value(
                        ConfigLoader._strip_value(value)
                    )

            logger.info("Loaded config from %s (%d values)", config_path, len(config))
            return config

        except OSError as e:
            logger.error("Failed to load config file %s: %s", config_path, e)
            return config

    @staticmethod
    def _strip_value(value: str) -> str:
        value = value.strip()
        if '#' in value:
            value = value.split('#', 1)[0].strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        return value

    @staticmethod
    def _parse_value(value: str) -> Any:
        value_lower = value.lower()
        if value_lower in ('true', 'false', 'yes', 'no', 'on', 'off'):
            return value_lower in ('true', 'yes', 'on')

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value


__all__ = ["ConfigLoader"]
