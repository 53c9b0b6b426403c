"""
Configuration Manager - JSON-based settings and per-plugin settings scopes.

This module provides centralized configuration management for MangaWeave.
Application settings live in ``settings.json``; stored per-plugin overrides
live in ``plugins.json`` and are opened by plugin identifier. Plugins never
read this store directly: the registry resolves a scope into
``PluginSettings`` when it composes the plugin.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from threading import Lock

from pydantic import BaseModel, ValidationError

from mangaweave.core.config_schemas import AppSettings, PluginScope, PluginSettings, PluginsConfig
from mangaweave.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages application configuration with JSON persistence and validation.

    Provides thread-safe access to configuration data with automatic
    validation, default value management, and backup of corrupted files.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to './config' if not specified.
        """
        self.config_dir = Path(config_dir or "config")
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._settings_file = self.config_dir / "settings.json"
        self._plugins_file = self.config_dir / "plugins.json"

        # Thread-safe access to configuration data
        self._lock = Lock()
        self._settings: Optional[AppSettings] = None
        self._plugins: Optional[PluginsConfig] = None

        # Load initial configuration
        self._load_configurations()

    def _load_configurations(self) -> None:
        """Load all configuration files with error handling."""
        try:
            self._settings = self._load_model(self._settings_file, AppSettings)
            self._plugins = self._load_model(self._plugins_file, PluginsConfig)
            logger.debug("Configuration loaded successfully")
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}", str(self.config_dir))

    def _load_model(self, path: Path, model: type) -> Any:
        """Load and validate one configuration file, replacing corrupted files with defaults."""
        if not path.exists():
            logger.info(f"{path.name} not found, creating default configuration")
            instance = model()
            self._save_model(path, instance)
            return instance

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return model.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid {path.name}, using defaults: {e}")
            backup_path = path.with_suffix('.json.backup')
            path.replace(backup_path)
            logger.info(f"Corrupted {path.name} backed up to {backup_path}")

            instance = model()
            self._save_model(path, instance)
            return instance

    def _save_model(self, path: Path, instance: BaseModel) -> None:
        """Save a configuration model to file with atomic write."""
        temp_file = path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(instance.model_dump(mode='json'), f, indent=2, ensure_ascii=False)
            temp_file.replace(path)
            logger.debug(f"{path.name} saved successfully")
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise ConfigurationError(f"Failed to save {path.name}: {e}", str(path))

    @property
    def settings(self) -> AppSettings:
        """Get current application settings (thread-safe)."""
        with self._lock:
            if self._settings is None:
                self._settings = self._load_model(self._settings_file, AppSettings)
            return self._settings

    @property
    def plugins(self) -> PluginsConfig:
        """Get current per-plugin scopes (thread-safe)."""
        with self._lock:
            if self._plugins is None:
                self._plugins = self._load_model(self._plugins_file, PluginsConfig)
            return self._plugins

    def update_setting(self, key_path: str, value: Any) -> None:
        """
        Update a specific setting using dot notation.

        Args:
            key_path: Dot-separated path to the setting (e.g., 'network.timeout')
            value: New value for the setting

        Raises:
            ConfigurationError: If key path is invalid or value is invalid
        """
        with self._lock:
            if self._settings is None:
                raise ConfigurationError("Settings not loaded")

            settings_dict = self._settings.model_dump()

            keys = key_path.split('.')
            current = settings_dict

            for key in keys[:-1]:
                if not isinstance(current, dict) or key not in current:
                    raise ConfigurationError(f"Invalid setting path: {key_path}")
                current = current[key]

            final_key = keys[-1]
            if not isinstance(current, dict) or final_key not in current:
                raise ConfigurationError(f"Invalid setting key: {final_key}")

            current[final_key] = value

            try:
                updated_settings = AppSettings.model_validate(settings_dict)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid setting value: {e}", str(self._settings_file))

            self._settings = updated_settings
            self._save_model(self._settings_file, updated_settings)
            logger.info(f"Setting updated: {key_path} = {value}")

    def get_setting(self, key_path: str, default: Any = None) -> Any:
        """
        Get a specific setting using dot notation.

        Args:
            key_path: Dot-separated path to the setting
            default: Default value if setting not found

        Returns:
            The setting value or default
        """
        with self._lock:
            if self._settings is None:
                return default

            current: Any = self._settings.model_dump()
            try:
                for key in key_path.split('.'):
                    current = current[key]
                return current
            except (KeyError, TypeError):
                return default

    def open_scope(self, identifier: str) -> PluginScope:
        """
        Open the stored settings scope of a plugin.

        Args:
            identifier: Plugin identifier

        Returns:
            The stored scope, or an empty default scope
        """
        scope = self.plugins.get_scope(identifier)
        return scope.model_copy(deep=True) if scope else PluginScope()

    def update_scope(self, identifier: str, enabled: Optional[bool] = None, **settings: Any) -> PluginScope:
        """
        Update the stored scope of a plugin.

        Args:
            identifier: Plugin identifier
            enabled: New enabled flag, unchanged if None
            **settings: PluginSettings fields to override

        Returns:
            The updated scope

        Raises:
            ConfigurationError: If the resulting scope is invalid
        """
        with self._lock:
            if self._plugins is None:
                raise ConfigurationError("Plugin scopes not loaded")

            current = self._plugins.get_scope(identifier) or PluginScope()
            data = current.model_dump()
            if enabled is not None:
                data["enabled"] = enabled
            data["settings"].update(settings)

            try:
                scope = PluginScope.model_validate(data)
                PluginSettings.model_validate(scope.settings)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid settings for plugin '{identifier}': {e}", str(self._plugins_file))

            self._plugins.set_scope(identifier, scope)
            self._save_model(self._plugins_file, self._plugins)
            logger.info(f"Plugin scope updated: {identifier}")
            return scope

    def resolve_plugin_settings(self, identifier: str, defaults: Optional[Dict[str, Any]] = None) -> PluginSettings:
        """
        Resolve the effective settings for a plugin.

        Resolution order: application-wide settings, then the plugin's own
        defaults, then the stored scope.

        Args:
            identifier: Plugin identifier
            defaults: Defaults declared by the plugin class

        Returns:
            Validated PluginSettings

        Raises:
            ConfigurationError: If the merged values are invalid
        """
        settings = self.settings
        values: Dict[str, Any] = {
            "max_pages": settings.pagination.max_pages,
            "timeout": settings.network.operation_timeout,
            "script_timeout": settings.scripting.timeout,
        }
        values.update(defaults or {})
        values.update(self.open_scope(identifier).settings)

        try:
            return PluginSettings.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings for plugin '{identifier}': {e}", str(self._plugins_file))

    def reload_configuration(self) -> None:
        """Reload configuration from files."""
        with self._lock:
            logger.info("Reloading configuration from files")
            self._settings = None
            self._plugins = None
            self._load_configurations()

    def reset_to_defaults(self) -> None:
        """Reset all configuration to default values."""
        with self._lock:
            logger.warning("Resetting configuration to defaults")
            self._settings = AppSettings()
            self._plugins = PluginsConfig()
            self._save_model(self._settings_file, self._settings)
            self._save_model(self._plugins_file, self._plugins)


# Export configuration manager
__all__ = ["ConfigManager"]
