"""Logging helpers for Podita.

Thin wrapper over the standard library so every module logs under the
``podita.`` namespace, which applications can configure in one place.

Example:
    >>> from podita.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("parsed %d blocks", 3)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name, forced under ``podita.``.

    Example:
        >>> get_logger("mymodule").name
        'podita.mymodule'
        >>> get_logger("podita.parser").name
        'podita.parser'
    """
    if not (name == "podita" or name.startswith("podita.")):
        name = f"podita.{name}"
    return logging.getLogger(name)


def configure_logging(verbosity: int = 0) -> None:
    """Configure root logging for command-line use.

    Args:
        verbosity: 0 keeps the library quiet (the command prints its own
            diagnostics), 1 shows info, 2 or more debug
    """
    level = logging.CRITICAL
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
