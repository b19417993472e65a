"""
Logging setup for the frequency assignment tools.

Library modules log through ``logging.getLogger(__name__)``; command-line
scripts call setup_logging() once with the level from the configuration.
"""

import logging
from typing import Optional, Tuple, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Package loggers configured by setup_logging
PACKAGE_LOGGERS: Tuple[str, ...] = ("frequency_assignment", "fap_ext")


def resolve_level(level: Union[str, int, None]) -> int:
    """Map a level name or number to a logging level, defaulting to INFO"""
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[str(level).upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}. Must be one of {sorted(LOG_LEVELS)}") from None


def setup_logging(level: Union[str, int, None] = "INFO",
                  log_format: str = DEFAULT_FORMAT,
                  log_file: Optional[str] = None) -> None:
    """
    Configure console (and optional file) logging for the package loggers.

    Calling it again replaces the handlers instead of stacking them.
    """
    log_level = resolve_level(level)
    formatter = logging.Formatter(log_format)

    handlers = []
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(log_level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False
