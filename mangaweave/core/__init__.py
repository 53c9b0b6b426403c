"""
Core Layer - Models, configuration, transport and the plugin registry.

This module contains the entity models, the typed error taxonomy, the
configuration handling and the transports (HTTP and sandboxed scripting)
that site plugins are built on.
"""

from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.config_schemas import AppSettings, PluginScope, PluginSettings, PluginsConfig
from mangaweave.core.config_defaults import (
    create_default_config_files,
    get_default_plugins,
    get_default_settings,
)
from mangaweave.core.exceptions import (
    ConfigurationError,
    MangaWeaveError,
    NotFoundError,
    OperationTimeoutError,
    ParseError,
    PluginError,
    UnreachableError,
)
from mangaweave.core.models import (
    Capability,
    Chapter,
    Container,
    ImageData,
    Page,
    PluginDescriptor,
)
from mangaweave.core.tags import Tag, TagCategory, Tags

__all__ = [
    # Data Models
    "Capability",
    "Container",
    "Chapter",
    "Page",
    "ImageData",
    "PluginDescriptor",
    "Tag",
    "TagCategory",
    "Tags",
    # Configuration Management
    "ConfigManager",
    "AppSettings",
    "PluginScope",
    "PluginSettings",
    "PluginsConfig",
    # Configuration Utilities
    "create_default_config_files",
    "get_default_settings",
    "get_default_plugins",
    # Exceptions
    "MangaWeaveError",
    "ConfigurationError",
    "PluginError",
    "NotFoundError",
    "UnreachableError",
    "ParseError",
    "OperationTimeoutError",
]
