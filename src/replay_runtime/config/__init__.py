"""
Configuration module - Centralized settings management.

This module provides type-safe configuration management using Pydantic,
supporting environment variables, YAML files, and explicit overrides.

Usage:
    from replay_runtime.config import get_settings, load_config
    
    # Get global settings (loaded once)
    settings = get_settings()
    
    # Or load fresh settings with overrides
    settings = load_config(idle={"timeout_ms": 5000})

Environment Variables:
    REPLAY_RUNTIME__IDLE__TIMEOUT_MS=10000
    REPLAY_RUNTIME__IDLE__IDLE_WINDOW_MS=500
    REPLAY_RUNTIME__LOCATOR__WAIT_TIMEOUT_MS=3000
    REPLAY_RUNTIME__LOGGING__LEVEL=DEBUG
"""

from replay_runtime.config.settings import (
    Settings,
    IdleSettings,
    LocatorSettings,
    RequestSettings,
    ReconcileSettings,
    ExportSettings,
    LoggingSettings,
)
from replay_runtime.config.loader import ConfigLoader, load_config

# Global settings singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).
    
    Settings are loaded once from environment variables and config files.
    Call reset_settings() to reload.
    
    Returns:
        Global Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Reset the global settings (forces reload on next get_settings())."""
    global _settings
    _settings = None


__all__ = [
    "Settings",
    "IdleSettings",
    "LocatorSettings",
    "RequestSettings",
    "ReconcileSettings",
    "ExportSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_config",
    "get_settings",
    "reset_settings",
]
