from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from .errors import ConfigError

LOGGER_NAME = "git_reviewers"

# stdout is reserved for the result lines
console = Console(stderr=True)


def setup_logging(level: str = "WARNING") -> logging.Logger:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigError(f"unknown log level: {level!r}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    logger.handlers.clear()

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
