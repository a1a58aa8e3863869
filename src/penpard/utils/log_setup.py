"""Console logging for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "penpard-rich"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Route ``penpard.*`` loggers through a rich handler on stderr.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("penpard")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger
