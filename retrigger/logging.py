"""Logging from config and env.

Levels (inclusive):
- ERROR: batch failures and fatal errors
- WARNING: mergeability still unknown, failed reruns, and ERROR
- INFO: reruns and dispatches issued, WARNING, and ERROR
- DEBUG: polling delays, resolved states and all levels above

Configure via config.yaml (logging.level, logging.format, logging.annotations)
or env (LOGGING_LEVEL, LOGGING_FORMAT, LOGGING_ANNOTATIONS). With annotations
enabled, records are written as GitHub Actions workflow commands so warnings
and errors show up on the run summary.
"""

import logging

from retrigger.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Workflow command per level; INFO and unknown levels print as plain lines
_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


def _escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Formats records as GitHub Actions workflow commands (::warning::...)."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{_escape_data(message)}"


class RetriggerLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig) -> None:
        """Store logging config (level, format, annotations)."""
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._annotations = config.annotations

    def setup(self) -> None:
        """Apply level and format to the root logger."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            force=True,
        )
        if self._annotations:
            for handler in logging.root.handlers:
                handler.setFormatter(ActionsFormatter(self._format))

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger with the given name (uses root config)."""
        return logging.getLogger(name)
