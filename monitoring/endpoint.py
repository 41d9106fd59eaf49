"""
============================================================================
MEOW UPTIME MONITOR - ENDPOINT MODEL
============================================================================
An Endpoint describes what to check and how to judge the answer. It is
an immutable pydantic model: either every field validates, or
construction fails with a single EndpointValidationError naming the
first offending field.

Three interchangeable forms are supported, all lossless:

    record   ["api", "https://example.test/health", "GET", "200", "1s", "2"]
    payload  {"identifier": "api", "url": ..., "frequency": "1s", ...}
    json     the payload serialized as a JSON object

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import json
import re
from datetime import timedelta
from typing import Any, Dict, List, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from config.constants import Defaults, HTTPMethods, Limits, Patterns, RECORD_FIELDS
from exceptions.validation import EndpointValidationError
from utils.helpers import DurationHelper


IDENTIFIER_PATTERN = re.compile(Patterns.IDENTIFIER)


class Endpoint(BaseModel):
    """
    Something to monitor with according rules.

    Attributes
    ----------
    identifier : str
        Unique name of the endpoint, matching ``^[a-z][-a-z0-9]+$``.
    url : str
        Absolute URL to be requested, kept exactly as given.
    method : HTTPMethods
        GET or HEAD.
    status_online : int
        The status indicating that the endpoint is online.
    frequency : timedelta
        How often the endpoint is checked.
    fail_after : int
        Consecutive failed checks after which an alert is raised.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    identifier: str
    url: str
    method: HTTPMethods
    status_online: int = Field(ge=Limits.STATUS_MIN, le=Limits.STATUS_MAX)
    frequency: timedelta
    fail_after: int = Field(ge=Limits.FAIL_AFTER_MIN)

    # ------------------------------------------------------------------
    # FIELD VALIDATION
    # ------------------------------------------------------------------

    @field_validator("identifier")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not IDENTIFIER_PATTERN.fullmatch(v):
            raise ValueError(f'identifier "{v}" does not match pattern "{Patterns.IDENTIFIER}"')
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        try:
            parsed = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f'parse URL "{v}": {e}') from e
        if not parsed.is_absolute_url:
            raise ValueError(f'URL "{v}" is not absolute')
        return v

    @field_validator("method", mode="before")
    @classmethod
    def validate_method(cls, v: Any) -> Any:
        if isinstance(v, HTTPMethods):
            return v
        if v not in {m.value for m in HTTPMethods}:
            raise ValueError(f'"{v}" is not an allowed method')
        return v

    @field_validator("status_online", mode="before")
    @classmethod
    def validate_status_type(cls, v: Any) -> Any:
        # bool is an int subclass; reject it along with non-integral floats
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            raise ValueError(f'"{v}" is not a valid status code')
        return v

    @field_validator("fail_after", mode="before")
    @classmethod
    def validate_fail_after_type(cls, v: Any) -> Any:
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            raise ValueError(f'"{v}" is not a valid number of attempts')
        return v

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v: Any) -> timedelta:
        if isinstance(v, timedelta):
            return v
        if isinstance(v, str):
            try:
                nanoseconds = DurationHelper.parse_nanoseconds(v)
            except ValueError:
                raise ValueError(f'"{v}" is not a valid duration') from None
            if nanoseconds % DurationHelper.MICROSECOND:
                raise ValueError(f'"{v}" is finer than microsecond resolution')
            return DurationHelper.parse(v)
        raise ValueError(f'"{v}" is not a valid duration')

    @field_validator("frequency")
    @classmethod
    def validate_frequency(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError(f'"{DurationHelper.format(v)}" is not a positive duration')
        return v

    @field_serializer("frequency")
    def serialize_frequency(self, v: timedelta) -> str:
        return DurationHelper.format(v)

    @field_serializer("method")
    def serialize_method(self, v: HTTPMethods) -> str:
        return v.value

    # ------------------------------------------------------------------
    # CONSTRUCTORS
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        identifier: str,
        url: str,
        method: Any,
        status_online: Any,
        frequency: Any,
        fail_after: Any,
    ) -> "Endpoint":
        """
        Validate all fields and build an Endpoint.

        Raises
        ------
        EndpointValidationError
            For the first field (in declaration order) that is invalid.
        """
        return cls._build({
            "identifier": identifier,
            "url": url,
            "method": method,
            "status_online": status_online,
            "frequency": frequency,
            "fail_after": fail_after,
        })

    @classmethod
    def default(cls, identifier: str, url: str) -> "Endpoint":
        """GET, expecting 200, every 5 minutes, alerting after 3 failures."""
        return cls.create(
            identifier,
            url,
            Defaults.HTTP_METHOD,
            Defaults.STATUS_ONLINE,
            timedelta(seconds=Defaults.FREQUENCY_SECONDS),
            Defaults.FAIL_AFTER,
        )

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Endpoint":
        """Build an Endpoint from its keyed (JSON-compatible) form."""
        if not isinstance(payload, dict):
            raise EndpointValidationError("payload", f"expected an object, got {type(payload).__name__}")
        return cls._build(payload)

    @classmethod
    def from_json(cls, raw: str) -> "Endpoint":
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise EndpointValidationError("payload", f"unmarshal raw json: {e}", value=raw) from e
        return cls.from_payload(payload)

    @classmethod
    def from_record(cls, record: Sequence[str]) -> "Endpoint":
        """
        Build an Endpoint from a flat record holding the fields in the
        order identifier, url, method, status_online, frequency, fail_after.
        """
        if len(record) < len(RECORD_FIELDS):
            raise EndpointValidationError(
                "record",
                f"malformed record {list(record)} (needs {len(RECORD_FIELDS)} fields)",
            )
        return cls._build(dict(zip(RECORD_FIELDS, record)))

    @classmethod
    def _build(cls, data: Dict[str, Any]) -> "Endpoint":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise _first_error(e, data) from None

    # ------------------------------------------------------------------
    # SERIALIZATION
    # ------------------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return self.model_dump_json()

    def to_record(self) -> List[str]:
        payload = self.to_payload()
        return [str(payload[name]) for name in RECORD_FIELDS]

    def __str__(self) -> str:
        return " ".join(self.to_record())


def _first_error(error: ValidationError, data: Dict[str, Any]) -> EndpointValidationError:
    """Translate the first pydantic error into an EndpointValidationError."""
    errors = error.errors()
    order = {name: index for index, name in enumerate(RECORD_FIELDS)}
    first = min(errors, key=lambda err: order.get(str(err["loc"][0]) if err["loc"] else "", len(order)))

    field = str(first["loc"][0]) if first["loc"] else "payload"
    if first["type"] == "value_error":
        reason = str(first["ctx"]["error"])
    elif first["type"] == "missing":
        reason = "field is required"
    else:
        reason = first["msg"]
    return EndpointValidationError(field, reason, value=data.get(field))
