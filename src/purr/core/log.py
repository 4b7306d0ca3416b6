"""Logging setup.

Every module logs through ``logging.getLogger(__name__)``; this configures
the ``purr`` logger once per process. ``--verbose`` turns on DEBUG, which is
where step-by-step diagnostics live (commands run, URLs hit, files copied).
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Configure the purr logger for the whole process."""
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger("purr")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
