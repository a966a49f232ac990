"""Logging configuration for the gitnab CLI.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI. Log records go to stderr through rich so
they do not mix with the console output on stdout.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "GITNAB_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"


def resolve_level(level: str | int | None = None) -> int:
    """Resolve a level name or number.

    Order of precedence:
    1. Explicit `level` argument if given
    2. Environment variable `GITNAB_LOG_LEVEL`
    3. Fallback to `WARNING`
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL)
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Install a rich stderr handler on the root logger."""
    logging.basicConfig(
        level=resolve_level(level),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=force,
    )
