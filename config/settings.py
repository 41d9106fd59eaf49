"""
Settings Module for meow

Configuration management using Pydantic Settings.
Supports environment variables, .env files, and runtime overrides
from the command line. Includes validation and sensible defaults.
"""

from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging level enumeration."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class MonitorSettings(BaseSettingsConfig):
    """
    Monitoring Engine Configuration Settings

    Controls the HTTP client used by the probers, the size of the shared
    event channel and how long shutdown waits for probers to finish.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore"
    )

    request_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Upper bound for a single check in seconds"
    )
    event_queue_size: int = Field(
        default=1,
        ge=1,
        le=10000,
        description="Capacity of the channel between probers and aggregator"
    )
    shutdown_grace: float = Field(
        default=5.0,
        ge=0,
        le=120,
        description="Seconds to wait for probers to stop before cancelling them"
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow redirects before comparing the status code"
    )
    user_agent: str = Field(
        default="meow/1.0 (uptime monitor)",
        description="User agent string for probe requests"
    )
    log_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory the event log file is created in"
    )
    emoji: bool = Field(
        default=False,
        description="Prefix events with an emoji of their kind"
    )


class SourceSettings(BaseSettingsConfig):
    """
    Endpoint Source Settings

    Where the monitor fetches its endpoint definitions from.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore"
    )

    config_url: Optional[str] = Field(
        default=None,
        description="Base URL of the configuration service"
    )
    fetch_timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Timeout for fetching the endpoint list in seconds"
    )

    @field_validator("config_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the base URL so paths can be appended."""
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None


class AlertSettings(BaseSettingsConfig):
    """
    Alert Delivery Settings

    Webhook the ALERT events are posted to. Alerting is disabled
    when no webhook URL is configured.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALERT_",
        env_file=".env",
        extra="ignore"
    )

    webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook URL receiving {\"text\": ...} payloads"
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single webhook post in seconds"
    )
    queue_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Alerts waiting for delivery before new ones are dropped"
    )

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)


class ServerSettings(BaseSettingsConfig):
    """
    Configuration Service Settings

    Bind address, port and CSV file of the endpoint configuration
    service, plus the port of the canary target.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        extra="ignore"
    )

    addr: str = Field(
        default="0.0.0.0",
        description="Address the config service listens to"
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port the config service listens on"
    )
    file: Path = Field(
        default=Path("config.csv"),
        description="CSV file to store the configuration"
    )
    canary_port: int = Field(
        default=9000,
        ge=1,
        le=65535,
        description="Port the canary target listens on"
    )


class LoggingSettings(BaseSettingsConfig):
    """
    Logging Configuration Settings

    Diagnostic logging via loguru. The event log written by the
    aggregator is configured by MonitorSettings.log_dir instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    colorize: bool = Field(
        default=True,
        description="Colorize console output"
    )
    to_file: bool = Field(
        default=False,
        description="Also write diagnostics to a rotating file"
    )
    file_path: Path = Field(
        default=Path("logs/meow.log"),
        description="Path of the diagnostic log file"
    )
    rotation: str = Field(
        default="10 MB",
        description="Rotation policy of the diagnostic log file"
    )
    retention: str = Field(
        default="7 days",
        description="Retention policy of rotated diagnostic log files"
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    app_name: str = Field(
        default="meow",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Nested settings
    monitor: MonitorSettings = Field(
        default_factory=MonitorSettings
    )
    source: SourceSettings = Field(
        default_factory=SourceSettings
    )
    alert: AlertSettings = Field(
        default_factory=AlertSettings
    )
    server: ServerSettings = Field(
        default_factory=ServerSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    def to_dict(self, *, exclude_secrets: bool = True) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump(mode="json")

        if exclude_secrets and data["alert"].get("webhook_url"):
            # Webhook URLs embed their credentials in the path
            data["alert"]["webhook_url"] = "***"

        return data


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
