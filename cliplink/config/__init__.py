"""Configuration for ClipLink: pydantic models, YAML loader, manager."""

from cliplink.config.loader import ConfigLoadError, YAMLConfigLoader
from cliplink.config.manager import ConfigManager
from cliplink.config.models import ClipLinkConfig, DatabaseConfig, LoggingConfig, ServerConfig, SyncConfig

__all__ = [
    "ClipLinkConfig",
    "ConfigLoadError",
    "ConfigManager",
    "DatabaseConfig",
    "LoggingConfig",
    "ServerConfig",
    "SyncConfig",
    "YAMLConfigLoader",
]
