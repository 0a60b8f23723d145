"""
Logging setup for satnow.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once so everything ends up on stderr through rich.
"""

import logging
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(verbose=False, console=None):
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)


@contextmanager
def muted_console(logger=None):
    """Detach stream handlers while something else owns the terminal."""
    logger = logger or logging.getLogger()
    detached = [h for h in logger.handlers if isinstance(h, (logging.StreamHandler, RichHandler))]
    for h in detached:
        logger.removeHandler(h)
    # keeps logging.lastResort from writing to stderr
    null = logging.NullHandler()
    logger.addHandler(null)
    try:
        yield
    finally:
        logger.removeHandler(null)
        for h in detached:
            logger.addHandler(h)
