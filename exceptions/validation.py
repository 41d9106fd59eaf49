"""
Validation Exception Classes for meow

Provides specialized exceptions for endpoint validation errors.
"""

from __future__ import annotations

from typing import Any, Optional
from exceptions.base import MeowException


class ValidationException(MeowException):
    """
    Base Validation Exception

    Parent class for all validation-related exceptions.
    """

    default_error_code = 3000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: The field that failed validation
            value: The invalid value (sanitized)
            **kwargs: Additional arguments
        """
        super().__init__(message, **kwargs)

        if field:
            self.details["field"] = field

        if value is not None:
            self.details["value"] = self._sanitize_value(value)

    @staticmethod
    def _sanitize_value(value: Any) -> str:
        """Truncate long values for logging."""
        str_value = str(value)

        if len(str_value) > 100:
            str_value = str_value[:100] + "..."

        return str_value


class EndpointValidationError(ValidationException):
    """
    Endpoint Validation Error

    Raised when an endpoint cannot be constructed. Names the first
    field that violated its constraint and the reason.
    """

    default_error_code = 3001

    def __init__(
        self,
        field: str,
        reason: str,
        value: Optional[Any] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(f"{field}: {reason}", field=field, value=value, **kwargs)

        self.field = field
        self.reason = reason
