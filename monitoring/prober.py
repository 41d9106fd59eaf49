"""
============================================================================
MEOW UPTIME MONITOR - PROBER
============================================================================
One Prober drives one endpoint: check, classify, emit, wait, repeat.

Architecture
------------
Prober                    ← one asyncio.Task per endpoint
├── EndpointChecker       ← performs GET/HEAD via the shared httpx client
├── Classifier            ← decides whether a ProbeOutcome counts as "up"
├── ProberState           ← failure/recovery state machine (single writer)
└── events queue          ← shared with every other prober, drained by
                            the Aggregator; a full queue blocks the put

The first check happens immediately; later checks follow a fixed-interval
schedule armed with the endpoint's frequency. A shared stop token is
checked before every network call and before every wait, so shutdown
never has to kill a prober mid-flight.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import httpx

from config.constants import EventKind
from exceptions.monitoring import TransportError
from monitoring.endpoint import Endpoint
from monitoring.events import Event
from utils.helpers import DurationHelper
from utils.logger import MonitorLogger, get_logger


logger = get_logger("Prober")


# ============================================================================
# PROBE OUTCOME
# ============================================================================

@dataclass(frozen=True)
class ProbeOutcome:
    """
    Result of a single check. ``status_code`` is None when the request
    never produced a response; ``error`` then tells why.
    """
    status_code: Optional[int]
    elapsed: timedelta
    checked_at: datetime
    error: Optional[TransportError] = None

    @property
    def transport_failed(self) -> bool:
        return self.error is not None


Classifier = Callable[[Endpoint, ProbeOutcome], bool]


def status_matches(endpoint: Endpoint, outcome: ProbeOutcome) -> bool:
    """
    Default classification: online iff the observed status equals the
    endpoint's status_online. A transport failure has no status and
    therefore counts exactly like a mismatch.
    """
    return outcome.status_code is not None and outcome.status_code == endpoint.status_online


# ============================================================================
# STATE MACHINE
# ============================================================================

@dataclass
class ProberState:
    """
    Per-endpoint health state, owned by exactly one Prober.

    last_known_up is None until the first check completes.
    alert_raised is set once per outage and cleared on recovery.
    """
    consecutive_failures: int = 0
    last_known_up: Optional[bool] = None
    alert_raised: bool = False

    def transition(self, endpoint: Endpoint, success: bool, took: timedelta) -> List[Event]:
        """Apply one classified check and return the events it produces."""
        identifier = endpoint.identifier
        events: List[Event] = []

        if success:
            if self.last_known_up is False:
                events.append(Event(
                    f"{identifier} is online again (took {DurationHelper.format(took)})",
                    identifier,
                    EventKind.ONLINE_AGAIN,
                ))
            else:
                events.append(Event(
                    f"{identifier} is online (took {DurationHelper.format(took)})",
                    identifier,
                    EventKind.ONLINE,
                ))
            self.last_known_up = True
            self.consecutive_failures = 0
            self.alert_raised = False
            return events

        self.consecutive_failures += 1
        events.append(Event(
            f"{identifier} is not online ({self.consecutive_failures} times)",
            identifier,
            EventKind.NOT_ONLINE,
        ))
        if self.consecutive_failures >= endpoint.fail_after and not self.alert_raised:
            events.append(Event(
                f"ALERT: {identifier} is offline ({endpoint.fail_after} failed attempts)",
                identifier,
                EventKind.ALERT,
            ))
            self.alert_raised = True
        self.last_known_up = False
        return events


# ============================================================================
# HTTP CHECKER
# ============================================================================

class EndpointChecker:
    """
    Performs a single request against an endpoint using a shared
    httpx.AsyncClient.

    The whole request is bounded by ``timeout``; on expiry the check is
    reported as a transport failure. Only the status line is awaited,
    the body is never read.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float):
        self._client = client
        self.timeout = timeout

    async def check(self, endpoint: Endpoint) -> ProbeOutcome:
        method = endpoint.method.value
        checked_at = datetime.now(timezone.utc)
        start_time = time.perf_counter()
        status_code: Optional[int] = None
        error: Optional[TransportError] = None

        try:
            status_code = await asyncio.wait_for(
                self._request(method, endpoint.url),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            error = TransportError(
                f"perform request {endpoint.identifier} {method} {endpoint.url}: "
                f"timed out after {self.timeout}s",
                identifier=endpoint.identifier,
                method=method,
                url=endpoint.url,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = TransportError(
                f"perform request {endpoint.identifier} {method} {endpoint.url}: "
                f"{type(e).__name__}: {str(e)[:200]}",
                identifier=endpoint.identifier,
                method=method,
                url=endpoint.url,
                cause=e,
            )

        elapsed = timedelta(seconds=time.perf_counter() - start_time)
        return ProbeOutcome(
            status_code=status_code,
            elapsed=elapsed,
            checked_at=checked_at,
            error=error,
        )

    async def _request(self, method: str, url: str) -> int:
        async with self._client.stream(method, url) as response:
            return response.status_code


# ============================================================================
# PROBER
# ============================================================================

class Prober:
    """
    Runs the check/classify/wait loop for one endpoint until the stop
    token is set or the task is cancelled.

    Parameters
    ----------
    endpoint : Endpoint
        What to check.
    events : asyncio.Queue
        Shared channel to the Aggregator.
    checker : EndpointChecker
        Performs the actual request.
    stop_event : asyncio.Event | None
        Cooperative stop token shared by all probers.
    classifier : Classifier
        Decides success from an outcome (default: ``status_matches``).
    """

    def __init__(
        self,
        endpoint: Endpoint,
        events: asyncio.Queue,
        checker: EndpointChecker,
        stop_event: Optional[asyncio.Event] = None,
        classifier: Classifier = status_matches,
    ):
        self.endpoint = endpoint
        self.state = ProberState()
        self._events = events
        self._checker = checker
        self._stop = stop_event or asyncio.Event()
        self._classifier = classifier
        self._monitor_log = MonitorLogger()

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        period = self.endpoint.frequency.total_seconds()
        deadline = loop.time()

        self._monitor_log.log_start(
            self.endpoint.identifier,
            self.endpoint.url,
            DurationHelper.format(self.endpoint.frequency),
        )
        try:
            while not self._stop.is_set():
                await self.probe_once()

                if self._stop.is_set():
                    break

                deadline += period
                now = loop.time()
                if deadline < now:
                    # Missed tick: check again right away and re-anchor
                    deadline = now
                if await self._wait(deadline - now):
                    break
        finally:
            self._monitor_log.log_stop(self.endpoint.identifier)

    async def probe_once(self) -> List[Event]:
        """Perform one check, advance the state machine and emit its events."""
        outcome = await self._checker.check(self.endpoint)

        events: List[Event] = []
        if outcome.transport_failed:
            events.append(Event(
                f"check failed: {outcome.error}",
                self.endpoint.identifier,
                EventKind.CHECK_FAILED,
            ))

        success = self._classifier(self.endpoint, outcome)
        self._monitor_log.log_check(
            self.endpoint.identifier,
            self.endpoint.url,
            success,
            outcome.status_code,
            outcome.elapsed,
        )
        events.extend(self.state.transition(self.endpoint, success, outcome.elapsed))

        for event in events:
            await self._events.put(event)
        return events

    async def _wait(self, delay: float) -> bool:
        """Sleep until the next tick; returns True if stopped meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=max(delay, 0.0))
            return True
        except asyncio.TimeoutError:
            return False
