"""
Console Management - Centralized Rich console configuration.

This module provides the shared console with the application's named
styles, so every command prints through the same configuration.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.status import Status
from rich.theme import Theme


# Named styles used across the CLI
THEME = Theme({
    "primary": "bold blue",
    "accent": "magenta",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
    "info": "cyan",
    "muted": "dim",
})

# Global console instance
_console: Optional[Console] = None


def setup_console(
    force_terminal: Optional[bool] = None,
    width: Optional[int] = None,
    no_color: bool = False,
) -> Console:
    """
    Set up and configure the global Rich console.

    Args:
        force_terminal: Force terminal mode detection
        width: Console width override
        no_color: Disable colored output

    Returns:
        Configured Rich Console instance
    """
    global _console

    _console = Console(
        theme=THEME,
        force_terminal=force_terminal,
        width=width,
        no_color=no_color,
        color_system=None if no_color else "auto",
    )
    return _console


def get_console() -> Console:
    """
    Get the global Rich console instance.

    Creates a default console if none exists.
    """
    global _console

    if _console is None:
        _console = setup_console()

    return _console


@contextmanager
def status_spinner(message: str, spinner: str = "dots") -> Iterator[Status]:
    """Simple status spinner context manager."""
    status = Status(message, spinner=spinner, console=get_console())

    try:
        status.start()
        yield status
    finally:
        status.stop()


__all__ = [
    "THEME",
    "setup_console",
    "get_console",
    "status_spinner",
]
