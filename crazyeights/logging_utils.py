"""Logging configuration shared by the CLI commands."""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

# LOG_LEVEL=DEBUG / INFO / WARNING / ERROR
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()


def resolve_level(level: str | None) -> int:
    """Translate a level name into a ``logging`` constant (WARNING when unknown)."""

    name = (level or LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = None, handler: logging.Handler | None = None) -> None:
    """Call once at program start; headless commands log through Rich on stderr."""

    if handler is None:
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    logging.basicConfig(
        level=resolve_level(level),
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[handler],
        force=True,
    )
