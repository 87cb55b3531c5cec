"""Logging from config and env.

Levels (inclusive):
- ERROR: critical errors only
- WARNING: skipped repositories, browser launch failures, and ERROR
- INFO: login/refresh/logout progress, WARNING, and ERROR
- DEBUG: every provider request, callback rejections and all levels above

Configure via config.yaml (logging.level, logging.format), env
(LOGGING_LEVEL, LOGGING_FORMAT) or ``gk --verbose`` for DEBUG.
"""

import logging

from gkcli.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


class GkLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig, verbose: bool = False) -> None:
        """Store logging config (level and format); verbose forces DEBUG."""
        self._level = logging.DEBUG if verbose else _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
