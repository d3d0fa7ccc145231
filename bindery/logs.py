"""
Library logging.

Every module logs through logging.getLogger(__name__), under the "bindery"
namespace, which carries a NullHandler so nothing is printed unless the host
configures logging. install() is the opt-in shortcut: it attaches a rich
handler writing to the same stderr console the faults render on.
"""
import logging

from rich.logging import RichHandler

from .faults import console

logger = logging.getLogger("bindery")
logger.addHandler(logging.NullHandler())


def install(level=logging.DEBUG, /):
    """
    Attach a RichHandler to the "bindery" logger and set its level.

    Calling it again only updates the level; the handler is attached once.
    Returns the handler.
    """
    if not isinstance(level, int | str):
        raise TypeError("install() argument must be a logging level")

    for handler in logger.handlers:
        if isinstance(handler, RichHandler):
            break
    else:
        handler = RichHandler(console=console, show_path=False, markup=False)
        logger.addHandler(handler)

    logger.setLevel(level)
    return handler


def uninstall():
    """
    Detach the handlers added by install() and reset the level.
    """
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


__all__ = (
    "install",
    "uninstall",
)
