"""Logging from config and env.

Levels (inclusive):
- ERROR: fatal errors only
- WARNING: non-fatal issues (e.g. a comment that could not be deleted) and ERROR
- INFO: progress messages, WARNING, and ERROR
- DEBUG: resolved configuration and all levels above

Configure via the YAML file (logging.level, logging.format) or env
(LOGGING_LEVEL, LOGGING_FORMAT). DEBUG=true forces the DEBUG level.
"""

import logging

from preview_comment.config import LoggingConfig

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


class PreviewLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig, debug: bool = False) -> None:
        self._level = logging.DEBUG if debug else _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
