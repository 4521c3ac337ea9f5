"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from dbsuspend.cli.common.output import err_console


def configure_logging(verbose: bool = False) -> None:
    """Route dbsuspend log records through Rich on stderr."""
    handler = RichHandler(
        console=err_console,
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("dbsuspend")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
