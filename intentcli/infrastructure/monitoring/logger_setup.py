"""Logging setup for intentcli.

Log records go to stderr so rich output on stdout stays clean; a log file
can be added through the ``logging.file`` config key. Provider modules
only call ``logging.getLogger(__name__)``; the request core logs every
retry, cache fallback and final failure through those loggers.
"""

import logging
import sys
from typing import Optional

from intentcli.infrastructure.config.settings import get_config

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are noisy at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
) -> None:
    """Replaces the root logger's handlers with a stderr handler and an optional file handler.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG).
        log_format: The format string for log messages.
        log_file: Optional path to a file for logging output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)

    # HTTP request lines are only useful while debugging
    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.info(f"Logging configured. Level={logging.getLevelName(log_level)}")


def resolve_log_level(level_name: Optional[str]) -> int:
    """Maps a level name such as 'debug' to its logging constant."""
    if not level_name:
        return DEFAULT_LOG_LEVEL
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        logging.warning(f"Unknown log level '{level_name}', using {logging.getLevelName(DEFAULT_LOG_LEVEL)}")
        return DEFAULT_LOG_LEVEL
    return level


def configure_logging_from_config(level_override: Optional[str] = None) -> int:
    """Sets up logging from the ``logging.level``, ``logging.format`` and ``logging.file`` keys.

    Args:
        level_override: Level name that wins over configuration (the CLI's --verbose).

    Returns:
        The effective log level.
    """
    level = resolve_log_level(level_override or get_config("logging.level"))
    setup_logging(
        log_level=level,
        log_format=get_config("logging.format", DEFAULT_LOG_FORMAT),
        log_file=get_config("logging.file"),
    )
    return level
