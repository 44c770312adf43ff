"""Configuration management for SignageBot."""

from .exceptions import SettingsError, SettingsFileError, SettingsValidationError
from .settings import LoggingSettings, NavigationSettings, SignageSettings, load_settings

__all__ = [
    "LoggingSettings",
    "NavigationSettings",
    "SettingsError",
    "SettingsFileError",
    "SettingsValidationError",
    "SignageSettings",
    "load_settings",
]
