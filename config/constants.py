"""
Constants Module for meow

Contains constant values, enumerations and static configuration
used throughout the application.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Tuple


class HTTPMethods(str, Enum):
    """HTTP methods an endpoint may be probed with."""

    GET = "GET"
    HEAD = "HEAD"


class EventKind(str, Enum):
    """
    Event Kind Enumeration

    Classifies the status lines emitted by a prober.
    """

    ONLINE = "online"
    ONLINE_AGAIN = "online_again"
    NOT_ONLINE = "not_online"
    ALERT = "alert"
    CHECK_FAILED = "check_failed"

    @classmethod
    def get_emoji(cls, kind: "EventKind") -> str:
        """Get emoji for event kind."""
        emojis = {
            cls.ONLINE: "\U0001f431",
            cls.ONLINE_AGAIN: "\U0001f638",
            cls.NOT_ONLINE: "\U0001f63f",
            cls.ALERT: "\U0001f640",
            cls.CHECK_FAILED: "❌",
        }
        return emojis.get(kind, "")

    @property
    def is_alert(self) -> bool:
        return self is EventKind.ALERT


class Defaults:
    """
    Default Values

    Values used by Endpoint.default().
    """

    HTTP_METHOD: Final[HTTPMethods] = HTTPMethods.GET
    STATUS_ONLINE: Final[int] = 200
    FREQUENCY_SECONDS: Final[int] = 300  # 5 minutes
    FAIL_AFTER: Final[int] = 3


class Limits:
    """Validation limits for endpoint fields."""

    STATUS_MIN: Final[int] = 100
    STATUS_MAX: Final[int] = 999
    FAIL_AFTER_MIN: Final[int] = 1


class Patterns:
    """Regular expression patterns."""

    IDENTIFIER: Final[str] = r"^[a-z][-a-z0-9]+$"

    # Path of a single endpoint resource in the config service
    ENDPOINT_RESOURCE: Final[str] = r"^/endpoints/([a-z][-a-z0-9]+)$"


# Field order of the flat record (CSV) form of an endpoint
RECORD_FIELDS: Final[Tuple[str, ...]] = (
    "identifier",
    "url",
    "method",
    "status_online",
    "frequency",
    "fail_after",
)

LOG_FILE_PREFIX: Final[str] = "meow-"
LOG_FILE_TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%dT%H-%M-%S"
