"""
Core Exceptions - Custom exception classes for MangaWeave.

This module defines the typed failures raised by plugins and the framework.
Listing and fetch operations never fail silently: an empty result is a success,
everything else surfaces as one of the errors below.
"""

from typing import Optional, Any


class MangaWeaveError(Exception):
    """Base exception class for all MangaWeave-specific errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize MangaWeave error.

        Args:
            message: Human-readable error message
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class ConfigurationError(MangaWeaveError):
    """Raised when configuration-related errors occur."""

    def __init__(self, message: str, config_path: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize configuration error.

        Args:
            message: Error description
            config_path: Path to the problematic configuration file
            details: Additional error context
        """
        super().__init__(message, details)
        self.config_path = config_path


class PluginError(MangaWeaveError):
    """Raised when a plugin cannot be composed, registered or invoked."""

    def __init__(self, message: str, plugin_name: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize plugin error.

        Args:
            message: Error description
            plugin_name: Identifier of the problematic plugin
            details: Additional error context
        """
        super().__init__(message, details)
        self.plugin_name = plugin_name


class NotFoundError(MangaWeaveError):
    """Raised when a remote resource (or a registry entry) does not exist."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None, details: Optional[Any] = None):
        """
        Initialize not-found error.

        Args:
            message: Error description
            url: URL or identifier that could not be resolved
            status_code: HTTP status code if applicable
            details: Additional error context
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class UnreachableError(MangaWeaveError):
    """Raised when the network layer cannot complete a request."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None, details: Optional[Any] = None):
        """
        Initialize unreachable error.

        Args:
            message: Error description
            url: URL that caused the error
            status_code: HTTP status code for server-side failures
            details: Additional error context
        """
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code


class ParseError(MangaWeaveError):
    """Raised when a response does not match the expected extraction rule."""

    def __init__(self, message: str, url: Optional[str] = None, selector: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize parse error.

        Args:
            message: Error description
            url: URL of the unparsable response
            selector: CSS selector or rule that failed to match
            details: Additional error context
        """
        super().__init__(message, details)
        self.url = url
        self.selector = selector


class OperationTimeoutError(MangaWeaveError):
    """Raised when a network request, script or whole operation exceeds its bound."""

    def __init__(self, message: str, timeout: Optional[float] = None, url: Optional[str] = None, details: Optional[Any] = None):
        """
        Initialize timeout error.

        Args:
            message: Error description
            timeout: The bound in seconds that was exceeded
            url: URL being processed when the bound was hit
            details: Additional error context
        """
        super().__init__(message, details)
        self.timeout = timeout
        self.url = url


# Export all exception classes
__all__ = [
    "MangaWeaveError",
    "ConfigurationError",
    "PluginError",
    "NotFoundError",
    "UnreachableError",
    "ParseError",
    "OperationTimeoutError",
]
