"""
Logging utilities.

Library modules only ask for a logger; handlers are installed by the
application (the CLI calls ``setup_logging``).
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Log output goes to stderr so JSON printed by the CLI stays parseable.
console = Console(stderr=True)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging with rich handler"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                show_path=False,
                markup=False,
            )
        ],
        force=True,
    )

    # Reduce noise from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(name)
