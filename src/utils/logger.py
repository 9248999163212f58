import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from utils.config import LOG_FILE


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        width = CenteredFormatter.longest_name_length
        record.name = f"{record.name.center(width)}"
        return super().format(record)


_console: Optional[Console] = None


def shared_console() -> Console:
    """The one console every logger writes to, created on first use."""
    global _console
    if _console is None:
        # the TUI owns stdout while running, so log lines go to stderr or a file
        if LOG_FILE:
            _console = Console(file=open(LOG_FILE, "a", encoding="utf-8"), width=120)
        else:
            _console = Console(stderr=True)
    return _console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    Set DEBUG to any value to lower the level to DEBUG.
    """
    if name is None:
        name = "QuoteDesk"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=shared_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
