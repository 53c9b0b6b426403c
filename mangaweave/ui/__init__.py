"""
UI Layer - Rich console and error display.

This module contains the shared Rich console and the error panels used by
all CLI commands.
"""

from mangaweave.ui.console import get_console, setup_console, status_spinner
from mangaweave.ui.error_handler import ErrorHandler, display_info, display_warning, handle_error

__all__ = [
    # Console Management
    "get_console",
    "setup_console",
    "status_spinner",
    # Error Handling
    "ErrorHandler",
    "handle_error",
    "display_warning",
    "display_info",
]
