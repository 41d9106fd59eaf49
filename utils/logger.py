"""
============================================================================
MEOW UPTIME MONITOR - LOGGING UTILITY
============================================================================
Diagnostic logging built on loguru. The status events themselves are
not logged through here: the aggregator writes them to the console
stream and the event log file.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import sys
from datetime import timedelta
from typing import Optional

from loguru import logger

from config.settings import LoggingSettings, get_settings


# ============================================================================
# LOGGER CONFIGURATION
# ============================================================================

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | "
    "{extra[name]}:{function}:{line} - {message}"
)


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure logging system with console and optional file handlers.

    Args:
        settings: Logging settings (defaults to the cached application settings)
    """
    settings = settings or get_settings().logging

    # Remove default loguru handler
    logger.remove()
    logger.configure(extra={"name": "meow"})

    log_level = settings.level.value

    # Console Handler
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_level,
        colorize=settings.colorize,
        backtrace=True,
        diagnose=False,
    )

    # File Handler
    if settings.to_file:
        settings.file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.file_path,
            format=FILE_FORMAT,
            level=log_level,
            rotation=settings.rotation,
            retention=settings.retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"Logging initialized — level={log_level}, file={settings.to_file}")


def get_logger(name: Optional[str] = None):
    """
    Get logger instance with optional name.

    Args:
        name: Logger name (shown in the log line)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger


# ============================================================================
# SPECIALIZED LOGGERS
# ============================================================================

class MonitorLogger:
    """
    Specialized logger for monitoring operations.
    """

    def __init__(self):
        self.logger = get_logger("Monitor")

    def log_start(self, identifier: str, url: str, frequency: str):
        self.logger.info(f"Started probing {identifier} ({url}) every {frequency}")

    def log_check(self, identifier: str, url: str, success: bool,
                  status_code: Optional[int], took: timedelta):
        """Log a monitoring check."""
        if success:
            self.logger.debug(
                f"Check successful for {identifier} ({url}) — "
                f"status {status_code} in {took.total_seconds():.3f}s"
            )
        else:
            self.logger.debug(
                f"Check failed for {identifier} ({url}) — status {status_code}"
            )

    def log_stop(self, identifier: str):
        self.logger.info(f"Stopped probing {identifier}")
