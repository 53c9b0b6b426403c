"""
Configuration Schemas - Pydantic models for configuration validation.

This module defines the data structures and validation rules for
application settings and per-plugin settings scopes.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
)


class NetworkSettings(BaseModel):
    """Network-related configuration settings."""

    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Per-request timeout in seconds"
    )
    operation_timeout: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Bound for a whole listing or fetch operation (None = unbounded)"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User agent string for requests"
    )
    connection_limit: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum number of simultaneous connections"
    )


class PaginationSettings(BaseModel):
    """Settings shared by all multi-page listing strategies."""

    max_pages: int = Field(
        default=1000,
        ge=1,
        description="Hard cap on pages fetched by one pagination run"
    )


class ScriptingSettings(BaseModel):
    """Sandboxed script execution settings."""

    headless: bool = Field(
        default=True,
        description="Run the browser without a window"
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=600.0,
        description="Bound for loading a document and resolving a script"
    )
    max_sessions: int = Field(
        default=2,
        ge=1,
        le=16,
        description="Maximum number of concurrent browser sessions"
    )
    driver_path: Optional[str] = Field(
        default=None,
        description="Path to chromedriver (auto-detected if None)"
    )
    window_size: str = Field(
        default="1920,1080",
        description="Browser window size"
    )

    @field_validator('window_size')
    @classmethod
    def validate_window_size(cls, v: str) -> str:
        """Validate the WIDTH,HEIGHT format."""
        parts = v.split(',')
        if len(parts) != 2 or not all(part.strip().isdigit() for part in parts):
            raise ValueError("Window size must look like '1920,1080'")
        return ",".join(part.strip() for part in parts)


class HealthSettings(BaseModel):
    """Website health check settings."""

    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Liveness request timeout in seconds"
    )
    max_concurrent: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum number of websites checked concurrently"
    )
    report_directory: str = Field(
        default="reports",
        description="Directory for generated health reports"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level"
    )


class AppSettings(BaseModel):
    """Main application settings container."""

    network: NetworkSettings = Field(default_factory=NetworkSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    scripting: ScriptingSettings = Field(default_factory=ScriptingSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode='after')
    def validate_settings_consistency(self) -> 'AppSettings':
        """Validate that settings are internally consistent."""
        operation_timeout = self.network.operation_timeout
        if operation_timeout is not None and operation_timeout < self.network.timeout:
            raise ValueError("network.operation_timeout must not be shorter than network.timeout")
        return self


class PluginSettings(BaseModel):
    """
    Resolved settings handed to one plugin at composition time.

    Strategies only ever read these values; they never open the settings
    store themselves.
    """

    anti_hotlink: bool = Field(
        default=True,
        description="Send a synthetic Referer header when fetching images"
    )
    max_pages: int = Field(
        default=1000,
        ge=1,
        description="Hard cap on pages per pagination run"
    )
    timeout: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Bound for a whole operation (None = unbounded)"
    )
    script_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Bound for sandboxed script execution"
    )
    extra: Dict[str, Any] = Field(
        default_factory=dict,
        description="Plugin-specific values"
    )


class PluginScope(BaseModel):
    """Stored overrides for one plugin, as persisted in plugins.json."""

    enabled: bool = Field(
        default=True,
        description="Whether the plugin is admitted to the registry"
    )
    settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Overrides for PluginSettings fields"
    )

    @field_validator('settings')
    @classmethod
    def validate_settings(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Reject keys that are not PluginSettings fields."""
        unknown = set(v) - set(PluginSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown plugin settings: {', '.join(sorted(unknown))}")
        return v


class PluginsConfig(BaseModel):
    """Per-plugin settings scopes container."""

    plugins: Dict[str, PluginScope] = Field(
        default_factory=dict,
        description="Stored scopes keyed by plugin identifier"
    )

    def get_scope(self, identifier: str) -> Optional[PluginScope]:
        """Get stored scope for a specific plugin."""
        return self.plugins.get(identifier)

    def set_scope(self, identifier: str, scope: PluginScope) -> None:
        """Store a scope for a plugin."""
        self.plugins[identifier] = scope


# Export all configuration models
__all__ = [
    "DEFAULT_USER_AGENT",
    "NetworkSettings",
    "PaginationSettings",
    "ScriptingSettings",
    "HealthSettings",
    "LoggingSettings",
    "AppSettings",
    "PluginSettings",
    "PluginScope",
    "PluginsConfig",
]
