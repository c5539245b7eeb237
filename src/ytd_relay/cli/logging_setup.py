"""Logging configuration for the CLI process.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed here, once, by the entry point.  Rich's handler is used
when Rich is importable, mirroring how the console degrades.
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio",)


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single root handler at *level*."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = level

    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        logging.basicConfig(level=resolved, format=_FORMAT, force=True)
    else:
        from ytd_relay.cli.console import get_rich_console

        logging.basicConfig(
            level=resolved,
            format="%(name)s: %(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(
                    console=get_rich_console(),
                    show_path=False,
                    rich_tracebacks=True,
                ),
            ],
            force=True,
        )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
