"""
Logging for deferio.

Modules log through ``get_logger(__name__)``, which has no side effects:
records go to the ``deferio`` logger tree and, with no configuration, are
dropped by a ``NullHandler`` and whatever the host application set up on
the root logger. ``configure_logging`` is an explicit opt-in that attaches
one console handler to the ``deferio`` logger only; the root logger and the
host's handlers are never touched.
"""

import logging
import os
import sys
from typing import ClassVar, Optional

PACKAGE_LOGGER = "deferio"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_COLOR_FORMAT = "\x1b[90m%(asctime)s\x1b[0m | %(levelname_color)s | \x1b[36m%(name)s\x1b[0m | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def _supports_color(stream) -> bool:
    try:
        return stream.isatty() and os.getenv("NO_COLOR") is None
    except Exception:
        return False


class _LevelColorFormatter(logging.Formatter):
    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\x1b[37m",  # light gray
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[41m",  # red background
    }

    RESET: ClassVar[str] = "\x1b[0m"

    def __init__(self, fmt: str, datefmt: str, use_color: bool):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            color = self.COLORS.get(record.levelname, "")
            record.levelname_color = f"{color}{record.levelname}{self.RESET}" if color else record.levelname
        else:
            record.levelname_color = record.levelname
        return super().format(record)


class _DeferioHandler(logging.StreamHandler):
    """Marker type so repeated configuration replaces its own handler only."""


def configure_logging(
    level: Optional[str | int] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    stream=None,
    propagate: bool = False,
) -> logging.Logger:
    """Send deferio's log records to a console handler.

    Calling it again replaces the handler it installed before.

    Environment overrides:
    - `DEFERIO_LOG_LEVEL` (or `LOG_LEVEL` / `DEBUG`)
    - `DEFERIO_LOG_FORMAT`
    - `DEFERIO_LOG_DATEFMT`

    Args:
        level: Level name or number. Defaults to ``Environment.get_log_level()``.
        fmt: Record format. Defaults to a coloured format on TTYs.
        datefmt: Timestamp format.
        stream: Target stream, ``sys.stderr`` by default.
        propagate: Also pass records on to the root logger's handlers.

    Returns:
        The configured ``deferio`` logger.
    """
    from deferio.config.environment import Environment

    if level is None:
        level = Environment.get_log_level()
    if isinstance(level, str):
        level = level.upper()

    stream = stream if stream is not None else sys.stderr
    use_color = _supports_color(stream)
    if fmt is None:
        fmt = os.getenv("DEFERIO_LOG_FORMAT") or (_COLOR_FORMAT if use_color else _DEFAULT_FORMAT)
    if datefmt is None:
        datefmt = os.getenv("DEFERIO_LOG_DATEFMT", _DEFAULT_DATEFMT)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if isinstance(h, _DeferioHandler)]:
        logger.removeHandler(existing)

    handler = _DeferioHandler(stream)
    handler.setFormatter(_LevelColorFormatter(fmt=fmt, datefmt=datefmt, use_color=use_color))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
    return logger


def reset_logging() -> None:
    """Undo :func:`configure_logging`."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in [h for h in logger.handlers if isinstance(h, _DeferioHandler)]:
        logger.removeHandler(existing)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger."""
    return logging.getLogger(name)
