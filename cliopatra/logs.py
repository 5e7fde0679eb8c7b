"""
Logging for cliopatra.

Every module logs to a child of the "cliopatra" logger. The package itself only
installs a NullHandler; applications that want the match trace call install().
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("cliopatra")


def install(level=logging.DEBUG, /, *, console=None):
    """
    Attach a rich handler (stderr) to the package logger and set its level.

    Calling it again replaces the previously installed handler.
    Returns the handler.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


__all__ = (
    "install",
)
