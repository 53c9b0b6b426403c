"""
Error Handler - Error panels with context and suggestions.

This module provides consistent error display across the CLI: every typed
failure gets a panel with its context fields and a short list of actionable
suggestions.
"""

import traceback
from typing import List, Optional

from rich.panel import Panel

from mangaweave.core.exceptions import (
    ConfigurationError,
    MangaWeaveError,
    NotFoundError,
    OperationTimeoutError,
    ParseError,
    PluginError,
    UnreachableError,
)
from mangaweave.ui.console import get_console


class ErrorHandler:
    """Handles error display with consistent formatting and helpful context."""

    def handle_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """
        Handle and display an error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Additional context about where the error occurred
            show_traceback: Whether to show the full traceback
        """
        if isinstance(error, ConfigurationError):
            self._display(
                "⚙️  Configuration Error",
                error.message,
                [("Configuration file", error.config_path)],
                context,
                [
                    "Check configuration file syntax and format",
                    "Inspect stored plugin scopes in [cyan]plugins.json[/cyan]",
                    "Delete the configuration directory to restore defaults",
                ],
                error.details if show_traceback else None,
            )
        elif isinstance(error, PluginError):
            self._display(
                "🔌 Plugin Error",
                error.message,
                [("Plugin", error.plugin_name)],
                context,
                [
                    "List loaded plugins with [cyan]mangaweave sources list[/cyan]",
                    "Inspect the decoration chain with [cyan]mangaweave sources show ID[/cyan]",
                ],
                error.details if show_traceback else None,
            )
        elif isinstance(error, NotFoundError):
            self._display(
                "🔍 Not Found",
                error.message,
                [("URL", error.url), ("Status Code", error.status_code)],
                context,
                [
                    "The requested content may no longer be available",
                    "Re-list the parent container or chapter to get fresh identifiers",
                ],
                error.details,
            )
        elif isinstance(error, UnreachableError):
            suggestions = [
                "Check your internet connection",
                "Verify the website is accessible with [cyan]mangaweave websites check[/cyan]",
                "Try again in a few moments",
            ]
            if error.status_code and error.status_code >= 500:
                suggestions.insert(0, "The website server is experiencing issues")
            self._display(
                "🌐 Network Error",
                error.message,
                [("URL", error.url), ("Status Code", error.status_code)],
                context,
                suggestions,
                error.details if show_traceback else None,
            )
        elif isinstance(error, ParseError):
            self._display(
                "🧩 Parse Error",
                error.message,
                [("URL", error.url), ("Selector", error.selector)],
                context,
                [
                    "The website layout may have changed",
                    "Report the website so its plugin can be updated",
                ],
                error.details if show_traceback else None,
            )
        elif isinstance(error, OperationTimeoutError):
            self._display(
                "⏱️  Timeout",
                error.message,
                [("URL", error.url), ("Bound", f"{error.timeout}s" if error.timeout else None)],
                context,
                [
                    "Retry with a larger bound ([cyan]--timeout[/cyan])",
                    "Raise [cyan]network.timeout[/cyan] or [cyan]scripting.timeout[/cyan] in settings.json",
                ],
                error.details if show_traceback else None,
            )
        elif isinstance(error, MangaWeaveError):
            self._display("❌ Error", error.message, [], context, [], error.details, show_traceback)
        else:
            self._display(
                "💥 Unexpected Error",
                f"{error.__class__.__name__}: {error}",
                [],
                context,
                [
                    "Check the command syntax and arguments",
                    "Run again with [cyan]--debug[/cyan] for details",
                    "Report this issue if it persists",
                ],
                None,
                show_traceback,
            )

    def _display(
        self,
        title: str,
        message: str,
        fields: List[tuple],
        context: Optional[str],
        suggestions: List[str],
        details: Optional[object] = None,
        show_traceback: bool = False,
    ) -> None:
        content_parts = [f"[error]{message}[/error]"]

        for label, value in fields:
            if value is not None:
                content_parts.append(f"\n[dim]{label}:[/dim] [cyan]{value}[/cyan]")

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if suggestions:
            content_parts.append("\n\n[info]💡 Suggestions:[/info]")
            for suggestion in suggestions:
                content_parts.append(f"• {suggestion}")

        if details:
            content_parts.append(f"\n\n[dim]Details:[/dim]\n{details}")

        if show_traceback:
            content_parts.append(f"\n\n[dim]Traceback:[/dim]\n{traceback.format_exc()}")

        get_console().print(Panel(
            "\n".join(content_parts),
            title=title,
            border_style="red",
            padding=(1, 2)
        ))

    def display_warning(self, message: str, title: str = "⚠️  Warning") -> None:
        """Display a warning message."""
        get_console().print(Panel(
            f"[warning]{message}[/warning]",
            title=f"[warning]{title}[/warning]",
            border_style="yellow",
            padding=(1, 2)
        ))

    def display_info(self, message: str, title: str = "ℹ️  Information") -> None:
        """Display an information message."""
        get_console().print(Panel(
            f"[info]{message}[/info]",
            title=f"[info]{title}[/info]",
            border_style="cyan",
            padding=(1, 2)
        ))


# Global error handler instance
_error_handler = ErrorHandler()


def handle_error(
    error: Exception,
    context: Optional[str] = None,
    show_traceback: bool = False
) -> None:
    """
    Handle and display an error using the global error handler.

    Args:
        error: Exception to handle
        context: Additional context
        show_traceback: Whether to show traceback
    """
    _error_handler.handle_error(error, context, show_traceback)


def display_warning(message: str, title: str = "⚠️  Warning") -> None:
    """Display a warning message using the global error handler."""
    _error_handler.display_warning(message, title)


def display_info(message: str, title: str = "ℹ️  Information") -> None:
    """Display an information message using the global error handler."""
    _error_handler.display_info(message, title)


# Export error handling functions
__all__ = [
    "ErrorHandler",
    "handle_error",
    "display_warning",
    "display_info",
]
