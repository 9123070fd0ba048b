"""Logging utilities for figpolish.

All submodules log through the single ``figpolish`` logger defined here.  By
default the logger is silent (a ``NullHandler`` is installed); applications
can enable console output with :func:`configure_logging`.  The per-call
``log_level`` setting of :func:`figpolish.beautify` is applied with
:func:`log_level_scope`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator


# Global project-wide logger -------------------------------------------------
logger = logging.getLogger("figpolish")
logger.addHandler(logging.NullHandler())

# verbosity (0 silent, 1 info/warnings, 2 trace) -> logging level
_VERBOSITY_LEVELS = {
    0: logging.CRITICAL + 1,
    1: logging.INFO,
    2: logging.DEBUG,
}


def configure_logging(enabled: bool = True, level: int = logging.INFO) -> None:
    """Configure the global ``figpolish`` logger.

    Parameters
    ----------
    enabled:
        If ``True`` (default) a ``StreamHandler`` is installed.  If ``False``
        logging output is suppressed.
    level:
        Logging level used when enabling the handler.  Per-element styling
        traces are emitted at ``DEBUG``.
    """

    logger.handlers.clear()

    if enabled:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(level)
    else:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)


def level_for_verbosity(verbosity: int) -> int:
    """Map a 0/1/2 verbosity value to a :mod:`logging` level."""
    verbosity = max(0, min(2, int(verbosity)))
    return _VERBOSITY_LEVELS[verbosity]


@contextmanager
def log_level_scope(verbosity: int) -> Iterator[logging.Logger]:
    """Temporarily set the ``figpolish`` logger level for one call."""
    previous = logger.level
    logger.setLevel(level_for_verbosity(verbosity))
    try:
        yield logger
    finally:
        logger.setLevel(previous)


__all__ = ["logger", "configure_logging", "level_for_verbosity", "log_level_scope"]
