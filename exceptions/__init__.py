"""
Exceptions Package for meow

Provides the exception hierarchy for error handling
throughout the application.
"""

from exceptions.base import (
    MeowException,
    ConfigurationError,
    StartupFatalError,
    ShutdownError
)

from exceptions.store import (
    StoreException,
    PersistenceError
)

from exceptions.validation import (
    ValidationException,
    EndpointValidationError
)

from exceptions.monitoring import (
    MonitoringException,
    TransportError
)

__all__ = [
    # Base exceptions
    "MeowException",
    "ConfigurationError",
    "StartupFatalError",
    "ShutdownError",

    # Store exceptions
    "StoreException",
    "PersistenceError",

    # Validation exceptions
    "ValidationException",
    "EndpointValidationError",

    # Monitoring exceptions
    "MonitoringException",
    "TransportError"
]
