"""
Configuration Package for meow

This package contains all configuration-related modules including:
- Settings management with environment variable support
- Constants and enums used throughout the application
"""

from config.settings import (
    Settings,
    MonitorSettings,
    SourceSettings,
    AlertSettings,
    ServerSettings,
    LoggingSettings,
    get_settings,
)

from config.constants import (
    HTTPMethods,
    EventKind,
    Defaults,
    Limits,
    Patterns,
    RECORD_FIELDS,
)

__all__ = [
    # Settings
    "Settings",
    "MonitorSettings",
    "SourceSettings",
    "AlertSettings",
    "ServerSettings",
    "LoggingSettings",
    "get_settings",

    # Constants
    "HTTPMethods",
    "EventKind",
    "Defaults",
    "Limits",
    "Patterns",
    "RECORD_FIELDS",
]
