"""
Configuration Defaults - Default configuration templates and utilities.

This module provides default configuration templates and utilities
for creating configuration files with sensible defaults.
"""

import json
from pathlib import Path

from mangaweave.core.config_schemas import AppSettings, PluginsConfig


def get_default_settings() -> AppSettings:
    """
    Get default application settings.

    Returns:
        AppSettings instance with sensible defaults
    """
    return AppSettings()


def get_default_plugins() -> PluginsConfig:
    """
    Get default per-plugin scopes.

    No scope is stored by default; every plugin runs with its own defaults.

    Returns:
        Empty PluginsConfig instance
    """
    return PluginsConfig()


def create_default_config_files(config_dir: Path) -> None:
    """
    Create default configuration files in the specified directory.

    Existing files are left untouched.

    Args:
        config_dir: Directory to create configuration files in
    """
    config_dir.mkdir(parents=True, exist_ok=True)

    defaults = {
        "settings.json": get_default_settings(),
        "plugins.json": get_default_plugins(),
    }

    for file_name, model in defaults.items():
        path = config_dir / file_name
        if not path.exists():
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(model.model_dump(mode='json'), f, indent=2, ensure_ascii=False)


__all__ = [
    "get_default_settings",
    "get_default_plugins",
    "create_default_config_files",
]
