"""Logging setup for send_mail.

Registers two extra levels next to the standard ones:

- ``TRACE`` (5): SMTP dialogue, below DEBUG.
- ``SUCCESS`` (25): completed operations, between INFO and WARNING.

Modules log through ``logging.getLogger(__name__)``; :func:`setup_logging`
attaches a :class:`rich.logging.RichHandler` to the ``send_mail`` logger.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace

from rich.console import Console
from rich.logging import RichHandler

TRACE_LEVEL = 5
SUCCESS_LEVEL = 25

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

LOGGING_LEVEL = SimpleNamespace(
    TRACE=TRACE_LEVEL,
    DEBUG=logging.DEBUG,
    INFO=logging.INFO,
    SUCCESS=SUCCESS_LEVEL,
    WARNING=logging.WARNING,
    ERROR=logging.ERROR,
    CRITICAL=logging.CRITICAL,
)

#: Root logger name of the package.
LOGGER_NAME = "send_mail"

_HANDLER_MARKER = "_send_mail_handler"


def resolve_level(level: int | str) -> int:
    """Convert a level name or number into a logging level.

    Args:
        level: Level number or case-insensitive name (``"trace"``, ``"INFO"``...).

    Returns:
        Numeric logging level.

    Raises:
        ValueError: If the name is unknown or ``level`` is neither str nor int.

    Examples:
        >>> resolve_level("trace")
        5
        >>> resolve_level(20)
        20
    """
    if isinstance(level, int):
        return level
    if not isinstance(level, str):
        raise ValueError(f"Invalid log level: {level!r} (expected a name or a number)")
    value = getattr(LOGGING_LEVEL, level.strip().upper(), None)
    if value is None:
        raise ValueError(f"Unknown log level: {level!r}")
    return int(value)


def verbosity_to_level(verbosity: int) -> int | None:
    """Map a ``-v`` count to a level (None when no ``-v`` was given)."""
    if verbosity <= 0:
        return None
    if verbosity == 1:
        return logging.INFO
    if verbosity == 2:
        return logging.DEBUG
    return TRACE_LEVEL


def setup_logging(level: int | str = logging.WARNING, *, console: Console | None = None) -> logging.Logger:
    """Configure the ``send_mail`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Minimum level to emit.
        console: Rich console to write to (stderr by default).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)

    numeric = resolve_level(level)
    logger.setLevel(numeric)
    handler.setLevel(numeric)
    return logger


__all__ = [
    "LOGGER_NAME",
    "LOGGING_LEVEL",
    "SUCCESS_LEVEL",
    "TRACE_LEVEL",
    "resolve_level",
    "setup_logging",
    "verbosity_to_level",
]
