"""
Logging configuration.

Library modules only create loggers; the command line decides where records go.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int | str = logging.WARNING, console: Console | None = None) -> None:
    """
    Configure the 'templebuilder' logger with a rich handler.

    Args:
        level: Logging level (e.g. logging.DEBUG or "INFO")
        console: Console to log to. Defaults to stderr.
    """
    logger = logging.getLogger("templebuilder")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once.
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)
