"""
CLI Commands - Individual command implementations.

This module contains the command groups for plugin inspection, browsing
and website health checks.
"""

# Import all command modules for registration
from mangaweave.cli.commands import browse, sources, websites

__all__ = ["browse", "sources", "websites"]
