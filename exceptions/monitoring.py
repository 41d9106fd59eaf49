"""
Monitoring Exception Classes for meow

Errors raised while checking an endpoint. They never leave the
prober: a transport error is folded into the "not online"
classification.
"""

from __future__ import annotations

from typing import Any, Optional
from exceptions.base import MeowException


class MonitoringException(MeowException):
    """
    Base Monitoring Exception

    Parent class for all monitoring-related exceptions.
    """

    default_error_code = 4000
    default_recoverable = True

    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if identifier:
            self.details["identifier"] = identifier


class TransportError(MonitoringException):
    """
    Transport Error

    DNS, connect, timeout or protocol failure while performing a check.
    """

    default_error_code = 4001

    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, identifier=identifier, **kwargs)

        if method:
            self.details["method"] = method

        if url:
            self.details["url"] = url
