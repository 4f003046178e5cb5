"""Logging setup for the command line entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_logging_initialized = False


def setup_logging(verbose: bool = False) -> None:
    """Route library logs to stderr.

    Scan problems are rendered as panels, so only errors are logged by
    default. ``verbose`` lowers the level to DEBUG.
    """
    global _logging_initialized

    level = logging.DEBUG if verbose else logging.ERROR
    package_logger = logging.getLogger("skill_bundles")
    package_logger.setLevel(level)
    if _logging_initialized:
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    _logging_initialized = True
