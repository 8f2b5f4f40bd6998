"""Logging setup for the run-tui tool"""

import logging
import logging.handlers
from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler

from constants import APP_NAME, DEFAULT_LOG_LEVEL

_handler: Optional[RichHandler] = None


def setup_logger(name: str = APP_NAME, level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure the application logger; safe to call more than once"""
    global _handler

    root = logging.getLogger(APP_NAME)
    if _handler is None:
        # stderr keeps log lines out of the command printed on stdout
        _handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        _handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(_handler)
        root.propagate = False

    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    return get_logger(name)


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the application logger"""
    if name == APP_NAME or name.startswith(APP_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_NAME}.{name}")


@contextmanager
def hold_log_output(capacity: int = 10000) -> Iterator[Optional[logging.handlers.MemoryHandler]]:
    """Buffer log records while the terminal is in raw mode, then emit them

    Records go to the stderr handler once the block exits, so they never
    draw over the live preview.
    """
    if _handler is None:
        yield None
        return

    root = logging.getLogger(APP_NAME)
    # flushLevel above CRITICAL: nothing is written until the block ends
    held = logging.handlers.MemoryHandler(capacity, flushLevel=logging.CRITICAL + 1, target=_handler)
    root.removeHandler(_handler)
    root.addHandler(held)
    try:
        yield held
    finally:
        root.removeHandler(held)
        root.addHandler(_handler)
        held.close()
