"""Central logging utilities for the claim lifecycle engine.

The engine itself performs no I/O; log records are the only side channel
it uses, and they go through the standard ``logging`` hierarchy so the host
application decides where they end up.

Key Features
------------
1. configure_logging(): idempotent initialization of the root logger.
2. get_logger(name): helper that always returns a configured logger under
   the ``siniestro_core`` namespace.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = [
    "configure_logging",
    "get_logger",
]

_ROOT_LOGGER_NAME: Final = "siniestro_core"
_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once.

    Calling this function multiple times is safe; configuration is only
    applied on the first invocation.
    """
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def get_logger(
    name: str | None = None, *, level: int | str | None = None
) -> logging.Logger:
    """Return a module-scoped logger that is guaranteed to be configured."""
    configure_logging()
    if name is None:
        logger_name = _ROOT_LOGGER_NAME
    elif name.startswith(_ROOT_LOGGER_NAME):
        logger_name = name
    else:
        logger_name = f"{_ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(logger_name)
    if level is not None:
        logger.setLevel(level)
    return logger
