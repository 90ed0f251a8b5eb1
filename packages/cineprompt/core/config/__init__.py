"""Configuration management for CinePrompt."""

from cineprompt.core.config.loader import load_app_config, load_config
from cineprompt.core.config.models import (
    AppConfig,
    GeminiApiConfig,
    GenerationConfig,
    LoggingConfig,
)
from cineprompt.core.config.settings import (
    JsonSettingsStore,
    SettingsProvider,
    StaticSettingsProvider,
    UserSettings,
)

__all__ = [
    # Loaders
    "load_config",
    "load_app_config",
    # App-level config
    "AppConfig",
    "GeminiApiConfig",
    "GenerationConfig",
    "LoggingConfig",
    # User settings
    "JsonSettingsStore",
    "SettingsProvider",
    "StaticSettingsProvider",
    "UserSettings",
]
