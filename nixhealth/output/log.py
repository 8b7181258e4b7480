"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["setup_logging"]

DEFAULT_LOGGER_NAME = "nixhealth"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Send ``nixhealth`` log records to stderr through Rich.

    Warnings and errors are always shown; ``verbose`` adds debug records
    (commands run, skipped checks, tracebacks of faulting checks).
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger
