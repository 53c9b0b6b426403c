"""
Plugin Registry - Discovery and lookup of composed site plugins.

The registry is built once by the process entry point and passed to every
consumer. It discovers the site plugin classes shipped in
``mangaweave.plugins``, resolves each plugin's persisted settings, and keeps
exactly one composed instance per identifier. After ``load()`` it is only
read, so concurrent lookups need no locking.
"""

import importlib
import inspect
import logging
import pkgutil
from typing import Dict, Iterable, List, Optional, Type

from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.exceptions import MangaWeaveError, NotFoundError, PluginError
from mangaweave.core.http import HttpClient
from mangaweave.core.models import PluginDescriptor
from mangaweave.core.scripting import ScriptRunner, SeleniumScriptRunner
from mangaweave.plugins.base import SitePlugin


logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "mangaweave.plugins"

# Modules of the plugin package that never define site plugins
FRAMEWORK_MODULES = frozenset({"base", "composition"})


class PluginRegistry:
    """
    Holds one composed instance per site plugin, keyed by identifier.

    Plugins that fail to compose are left out and their error is kept in
    ``errors``; one broken plugin never prevents the others from loading.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        http: HttpClient,
        scripts: Optional[ScriptRunner] = None,
        package: str = DEFAULT_PACKAGE,
    ):
        """
        Initialize the registry.

        Args:
            config_manager: Source of the per-plugin settings scopes
            http: HTTP client shared by all plugins
            scripts: Script runner shared by all plugins
            package: Dotted name of the package scanned for plugins
        """
        self.config_manager = config_manager
        self.http = http
        self.scripts = scripts
        self.package = package

        self._plugins: Dict[str, SitePlugin] = {}
        self._errors: Dict[str, Exception] = {}
        self._loaded = False

    @classmethod
    def create(cls, config_manager: ConfigManager) -> "PluginRegistry":
        """Build a loaded registry with transport and scripting taken from the settings."""
        settings = config_manager.settings
        http = HttpClient(
            timeout=settings.network.timeout,
            user_agent=settings.network.user_agent,
            connection_limit=settings.network.connection_limit,
        )
        scripts = SeleniumScriptRunner(
            timeout=settings.scripting.timeout,
            max_sessions=settings.scripting.max_sessions,
            headless=settings.scripting.headless,
            driver_path=settings.scripting.driver_path,
            window_size=settings.scripting.window_size,
            user_agent=settings.network.user_agent,
        )
        registry = cls(config_manager, http, scripts)
        registry.load()
        return registry

    def discover(self) -> List[Type[SitePlugin]]:
        """
        Find the site plugin classes of the plugin package.

        Scans the top-level modules of the package; subpackages hold shared
        strategies and are skipped.

        Returns:
            Plugin classes in module order
        """
        package = importlib.import_module(self.package)
        classes: List[Type[SitePlugin]] = []

        for module_info in pkgutil.iter_modules(package.__path__):
            if module_info.ispkg or module_info.name in FRAMEWORK_MODULES:
                continue

            module_name = f"{self.package}.{module_info.name}"
            try:
                module = importlib.import_module(module_name)
            except Exception as e:
                self._errors[module_info.name] = PluginError(f"Failed to import plugin module {module_name}: {e}")
                logger.error(f"Failed to import plugin module {module_name}: {e}")
                continue

            found = [
                obj for _, obj in inspect.getmembers(module, inspect.isclass)
                if issubclass(obj, SitePlugin) and obj is not SitePlugin and obj.__module__ == module.__name__
            ]
            if not found:
                logger.warning(f"No site plugin found in {module_name}")
            classes.extend(found)

        logger.debug(f"Discovered {len(classes)} plugin class(es) in {self.package}")
        return classes

    def load(self, classes: Optional[Iterable[Type[SitePlugin]]] = None) -> None:
        """
        Instantiate every plugin with its resolved settings.

        Args:
            classes: Plugin classes to load (discovered when omitted)
        """
        if classes is None:
            classes = self.discover()

        for plugin_class in classes:
            identifier = plugin_class.identifier or plugin_class.__name__
            try:
                if identifier in self._plugins:
                    raise PluginError(
                        f"Duplicate plugin identifier '{identifier}' ({plugin_class.__name__})",
                        plugin_name=identifier,
                    )
                if not self.config_manager.open_scope(identifier).enabled:
                    logger.info(f"Plugin '{identifier}' is disabled")
                    continue

                settings = self.config_manager.resolve_plugin_settings(identifier, plugin_class.default_settings)
                self._plugins[identifier] = plugin_class(self.http, self.scripts, settings)
                logger.debug(f"Loaded plugin '{identifier}': {self._plugins[identifier].chain.describe()}")
            except MangaWeaveError as e:
                self._errors[identifier] = e
                logger.error(f"Failed to load plugin '{identifier}': {e}")

        self._loaded = True
        logger.info(f"Plugin registry ready: {len(self._plugins)} plugin(s), {len(self._errors)} error(s)")

    @property
    def errors(self) -> Dict[str, Exception]:
        """Get load errors keyed by plugin identifier (or module name)."""
        return dict(self._errors)

    def list_plugins(self) -> List[PluginDescriptor]:
        """Enumerate the descriptors of all loaded plugins."""
        return [plugin.descriptor for plugin in self._plugins.values()]

    def get_plugin(self, identifier: str) -> SitePlugin:
        """
        Look up a plugin by identifier.

        Raises:
            NotFoundError: If no loaded plugin has this identifier
        """
        plugin = self._plugins.get(identifier)
        if plugin is None:
            raise NotFoundError(f"Unknown plugin '{identifier}'", details=sorted(self._plugins))
        return plugin

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    async def close(self) -> None:
        """Release the shared transport and scripting resources."""
        await self.http.close()
        if self.scripts is not None:
            await self.scripts.close()
        logger.debug("Plugin registry closed")


__all__ = ["PluginRegistry", "DEFAULT_PACKAGE"]
