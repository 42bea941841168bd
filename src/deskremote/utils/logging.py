"""Logging setup for deskremote.

Handlers are attached to the ``deskremote`` package logger only, so
uvicorn's own loggers keep their configuration.
"""

from __future__ import annotations

import logging
import sys

from deskremote.config.settings import LoggingConfig

PACKAGE_LOGGER = "deskremote"


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the package logger from the logging settings.

    Calling it again replaces the handlers installed by the previous
    call instead of adding more.

    Args:
        config: Logging configuration. Defaults to INFO on stderr.

    Returns:
        The configured package logger.
    """
    config = config or LoggingConfig()
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    formatter = logging.Formatter(config.format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.debug("Logging to %d handler(s) at %s", len(handlers), config.level)
    return package_logger
