"""Configuration module for Notive."""

from .settings import (
    AISettings,
    AuthSettings,
    ClientSettings,
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AISettings",
    "AuthSettings",
    "ClientSettings",
    "DatabaseSettings",
    "ObservabilitySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
