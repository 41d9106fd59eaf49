"""
Store Exception Classes for meow

Errors of the endpoint configuration store.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union
from exceptions.base import MeowException


class StoreException(MeowException):
    """
    Base Store Exception

    Parent class for all configuration store exceptions.
    """

    default_error_code = 2000
    default_recoverable = False

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)

        if path:
            self.details["path"] = str(path)


class PersistenceError(StoreException):
    """
    Persistence Error

    Raised when saving the configuration fails. The in-memory store
    already holds the new value when this is raised.
    """

    default_error_code = 2001
