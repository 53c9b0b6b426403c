"""
CLI Context - Application state shared by the commands.

The entry point stores the configuration manager here. Commands open the
plugin registry through ``open_registry`` and hand it explicitly to the code
that needs it; the registry itself is never stored globally.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.registry import PluginRegistry


RegistryFactory = Callable[[ConfigManager], PluginRegistry]

# Global application state
_config_manager: Optional[ConfigManager] = None
_registry_factory: RegistryFactory = PluginRegistry.create


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    if _config_manager is None:
        raise RuntimeError("Configuration manager not initialized")
    return _config_manager


def set_config_manager(config_manager: ConfigManager) -> None:
    """Set the global configuration manager instance."""
    global _config_manager
    _config_manager = config_manager


def set_registry_factory(factory: Optional[RegistryFactory]) -> None:
    """Replace how commands build their registry (None restores the default)."""
    global _registry_factory
    _registry_factory = factory or PluginRegistry.create


@asynccontextmanager
async def open_registry(config_manager: Optional[ConfigManager] = None) -> AsyncIterator[PluginRegistry]:
    """Build a loaded registry and release its resources afterwards."""
    registry = _registry_factory(config_manager or get_config_manager())
    try:
        yield registry
    finally:
        await registry.close()


# Export context functions
__all__ = [
    "get_config_manager",
    "set_config_manager",
    "set_registry_factory",
    "open_registry",
]
