"""Shared fixtures for the meow test suite."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Iterator

import httpx
import pytest

from config.settings import MonitorSettings
from monitoring.endpoint import Endpoint
from monitoring.logfile import LogFile


@pytest.fixture
def make_endpoint() -> Callable[..., Endpoint]:
    """Factory building valid endpoints with overridable fields."""

    def _make(identifier: str = "api", **overrides: Any) -> Endpoint:
        fields = {
            "url": f"http://{identifier}.test/health",
            "method": "GET",
            "status_online": 200,
            "frequency": timedelta(seconds=60),
            "fail_after": 3,
        }
        fields.update(overrides)
        return Endpoint.create(identifier, **fields)

    return _make


@pytest.fixture
def monitor_settings() -> MonitorSettings:
    return MonitorSettings(
        request_timeout=2.0,
        event_queue_size=1,
        shutdown_grace=1.0,
        emoji=False,
    )


@pytest.fixture
def log_file(tmp_path) -> Iterator[LogFile]:
    sink = LogFile.open(tmp_path / "events.log")
    yield sink
    sink.close()


def status_client(*statuses: int) -> httpx.AsyncClient:
    """
    AsyncClient answering successive requests with the given statuses;
    the last status repeats once the list is exhausted.
    """
    remaining = list(statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return httpx.Response(status)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
