"""Tests for the prober state machine, the HTTP checker and the probe loop."""

from __future__ import annotations

import asyncio
import re
from datetime import datetime, timedelta, timezone
from typing import List

import httpx
import pytest

from config.constants import EventKind
from monitoring.endpoint import Endpoint
from monitoring.events import Event
from monitoring.prober import (
    EndpointChecker,
    ProbeOutcome,
    Prober,
    ProberState,
    status_matches,
)
from tests.conftest import status_client

TOOK = timedelta(milliseconds=12)


def kinds(events: List[Event]) -> List[EventKind]:
    return [event.kind for event in events]


def drain(queue: asyncio.Queue) -> List[Event]:
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


class TestProberState:
    """ProberState.transition()."""

    def test_first_success_is_online(self, make_endpoint) -> None:
        state = ProberState()
        events = state.transition(make_endpoint(), True, TOOK)
        assert kinds(events) == [EventKind.ONLINE]
        assert events[0].text == "api is online (took 12ms)"
        assert state.last_known_up is True

    def test_consecutive_successes_stay_online(self, make_endpoint) -> None:
        state = ProberState()
        endpoint = make_endpoint()
        state.transition(endpoint, True, TOOK)
        assert kinds(state.transition(endpoint, True, TOOK)) == [EventKind.ONLINE]

    def test_alert_after_fail_after_failures(self, make_endpoint) -> None:
        state = ProberState()
        endpoint = make_endpoint(fail_after=3)

        first = state.transition(endpoint, False, TOOK)
        second = state.transition(endpoint, False, TOOK)
        third = state.transition(endpoint, False, TOOK)
        fourth = state.transition(endpoint, False, TOOK)

        assert [e.text for e in first] == ["api is not online (1 times)"]
        assert [e.text for e in second] == ["api is not online (2 times)"]
        assert [e.text for e in third] == [
            "api is not online (3 times)",
            "ALERT: api is offline (3 failed attempts)",
        ]
        assert kinds(fourth) == [EventKind.NOT_ONLINE]
        assert state.alert_raised is True

    def test_fail_after_one_alerts_on_first_failure(self, make_endpoint) -> None:
        state = ProberState()
        events = state.transition(make_endpoint(fail_after=1), False, TOOK)
        assert kinds(events) == [EventKind.NOT_ONLINE, EventKind.ALERT]

    def test_recovery_resets_and_rearms_alert(self, make_endpoint) -> None:
        state = ProberState()
        endpoint = make_endpoint(fail_after=1)

        state.transition(endpoint, False, TOOK)
        recovered = state.transition(endpoint, True, TOOK)
        assert kinds(recovered) == [EventKind.ONLINE_AGAIN]
        assert recovered[0].text == "api is online again (took 12ms)"
        assert state.consecutive_failures == 0
        assert state.alert_raised is False

        again = state.transition(endpoint, False, TOOK)
        assert kinds(again) == [EventKind.NOT_ONLINE, EventKind.ALERT]
        assert again[0].text == "api is not online (1 times)"

    def test_success_after_initial_failure_is_online_again(self, make_endpoint) -> None:
        state = ProberState()
        endpoint = make_endpoint()
        state.transition(endpoint, False, TOOK)
        assert kinds(state.transition(endpoint, True, TOOK)) == [EventKind.ONLINE_AGAIN]

    def test_one_alert_per_outage_of_fail_after_or_more(self, make_endpoint) -> None:
        state = ProberState()
        endpoint = make_endpoint(fail_after=3)
        results = "FFFFSFFFSFS"

        alert_positions = []
        for position, result in enumerate(results):
            events = state.transition(endpoint, result == "S", TOOK)
            if EventKind.ALERT in kinds(events):
                alert_positions.append(position)

        assert alert_positions == [2, 7]


class TestStatusMatches:
    def test_transport_failure_is_not_online(self, make_endpoint) -> None:
        outcome = ProbeOutcome(None, TOOK, datetime.now(timezone.utc))
        assert status_matches(make_endpoint(), outcome) is False

    def test_exact_status_required(self, make_endpoint) -> None:
        now = datetime.now(timezone.utc)
        endpoint = make_endpoint(status_online=204)
        assert status_matches(endpoint, ProbeOutcome(204, TOOK, now)) is True
        assert status_matches(endpoint, ProbeOutcome(200, TOOK, now)) is False


class TestEndpointChecker:
    """EndpointChecker.check() against an httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_uses_endpoint_method(self, make_endpoint) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, str(request.url)))
            return httpx.Response(204)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await EndpointChecker(client, timeout=1.0).check(
                make_endpoint(method="HEAD", url="http://api.test/ping")
            )

        assert seen == [("HEAD", "http://api.test/ping")]
        assert outcome.status_code == 204
        assert not outcome.transport_failed

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transport_failure(self, make_endpoint) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await EndpointChecker(client, timeout=1.0).check(make_endpoint())

        assert outcome.status_code is None
        assert outcome.transport_failed
        assert "perform request api GET http://api.test/health" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_failure(self, make_endpoint) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await EndpointChecker(client, timeout=0.05).check(make_endpoint())

        assert outcome.transport_failed
        assert "timed out" in str(outcome.error)


class TestProber:
    """Prober.probe_once() and Prober.run()."""

    @pytest.mark.asyncio
    async def test_outage_and_recovery_sequence(self) -> None:
        endpoint = Endpoint.create("api", "https://example.test/health", "GET", 200, "1s", 2)
        queue: asyncio.Queue = asyncio.Queue()
        async with status_client(200, 500, 500, 200) as client:
            prober = Prober(endpoint, queue, EndpointChecker(client, 1.0))
            for _ in range(4):
                await prober.probe_once()

        events = drain(queue)
        assert kinds(events) == [
            EventKind.ONLINE,
            EventKind.NOT_ONLINE,
            EventKind.NOT_ONLINE,
            EventKind.ALERT,
            EventKind.ONLINE_AGAIN,
        ]
        assert re.fullmatch(r"api is online \(took \S+\)", events[0].text)
        assert events[1].text == "api is not online (1 times)"
        assert events[2].text == "api is not online (2 times)"
        assert events[3].text == "ALERT: api is offline (2 failed attempts)"
        assert re.fullmatch(r"api is online again \(took \S+\)", events[4].text)

    @pytest.mark.asyncio
    async def test_transport_failure_emits_check_failed_first(self, make_endpoint) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        queue: asyncio.Queue = asyncio.Queue()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            prober = Prober(make_endpoint(), queue, EndpointChecker(client, 1.0))
            events = await prober.probe_once()

        assert kinds(events) == [EventKind.CHECK_FAILED, EventKind.NOT_ONLINE]
        assert events[0].text.startswith("check failed: perform request api")
        assert drain(queue) == events

    @pytest.mark.asyncio
    async def test_custom_classifier(self, make_endpoint) -> None:
        queue: asyncio.Queue = asyncio.Queue()
        async with status_client(503) as client:
            prober = Prober(
                make_endpoint(),
                queue,
                EndpointChecker(client, 1.0),
                classifier=lambda endpoint, outcome: outcome.status_code is not None,
            )
            events = await prober.probe_once()

        assert kinds(events) == [EventKind.ONLINE]

    @pytest.mark.asyncio
    async def test_run_checks_immediately_and_stops_on_token(self, make_endpoint) -> None:
        queue: asyncio.Queue = asyncio.Queue()
        stop = asyncio.Event()
        async with status_client(200) as client:
            prober = Prober(
                make_endpoint(frequency="10ms"),
                queue,
                EndpointChecker(client, 1.0),
                stop_event=stop,
            )
            task = asyncio.create_task(prober.run())
            await asyncio.sleep(0.1)
            stop.set()
            await asyncio.wait_for(task, timeout=2)

        events = drain(queue)
        assert len(events) >= 3
        assert all(event.kind is EventKind.ONLINE for event in events)

    @pytest.mark.asyncio
    async def test_long_frequency_stops_without_waiting_full_interval(self, make_endpoint) -> None:
        queue: asyncio.Queue = asyncio.Queue()
        stop = asyncio.Event()
        async with status_client(200) as client:
            prober = Prober(
                make_endpoint(frequency="1h"),
                queue,
                EndpointChecker(client, 1.0),
                stop_event=stop,
            )
            task = asyncio.create_task(prober.run())
            await asyncio.sleep(0.05)
            stop.set()
            await asyncio.wait_for(task, timeout=2)

        assert len(drain(queue)) == 1
