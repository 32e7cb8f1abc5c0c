"""Logging setup for aiopreq applications and the aiopreq command."""

import logging
import sys
from typing import IO, Optional, Union

from .errors import ConfigurationError

LOGGER_NAME = "aiopreq"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# aiohttp loggers that only become interesting when debugging a request
AIOHTTP_LOGGERS = ("aiohttp.client", "aiohttp.internal")

# Marks handlers installed here, so reconfiguring never removes a caller's own
_OWNED = "_aiopreq_owned"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown log level: {level!r}")
    return numeric


def _owned_handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    setattr(handler, _OWNED, True)
    return handler


def setup_logging(
    level: Union[str, int] = "WARNING",
    log_file: Optional[str] = None,
    *,
    stream: Optional[IO[str]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """
    Route aiopreq's retry warnings and failure errors to stderr (and a file).

    The library never calls this itself; without it records propagate to
    the root logger like any other library's. Once called, the "aiopreq"
    logger stops propagating so records are not printed twice.

    Calling it again only adjusts levels, unless ``force`` is set, which
    replaces the handlers installed by a previous call. Handlers added by
    the application are always left alone.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR) or number
        log_file: Optional file that receives the same records
        stream: Console stream, sys.stderr if None; stdout carries bodies
        format_string: Optional custom format for log messages
        force: Replace handlers from an earlier call

    Returns:
        The configured "aiopreq" logger

    Raises:
        ConfigurationError: If the level name is unknown
    """
    numeric_level = _resolve_level(level)
    fmt = format_string or DEFAULT_FORMAT
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    owned = [handler for handler in logger.handlers if getattr(handler, _OWNED, False)]
    if force:
        for handler in owned:
            logger.removeHandler(handler)
            handler.close()
        owned = []

    if owned:
        for handler in owned:
            handler.setLevel(numeric_level)
    else:
        logger.addHandler(_owned_handler(logging.StreamHandler(stream or sys.stderr), numeric_level, fmt))
        if log_file:
            logger.addHandler(_owned_handler(logging.FileHandler(log_file), numeric_level, fmt))

    logger.propagate = False

    # Connection-level chatter from aiohttp only at DEBUG
    for name in AIOHTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING)

    return logger
