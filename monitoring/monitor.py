"""
============================================================================
MEOW UPTIME MONITOR - MONITOR (SUPERVISOR)
============================================================================
Owns the probers and the aggregator for one run of the monitor.

Architecture
------------
Monitor                   ← top-level supervisor, one per process
├── httpx.AsyncClient     ← shared by every prober's EndpointChecker
├── events queue          ← bounded channel, many producers, one consumer
├── Prober × N            ← one asyncio.Task per endpoint ("prober-<id>")
└── Aggregator            ← one asyncio.Task draining the channel

Lifecycle
---------
1.  ``await monitor.run(endpoints, log_sink)`` — starts everything and
    blocks; it does not return under normal operation
2.  ``monitor.stop()`` — sets the shared stop token; run() then gives the
    probers ``shutdown_grace`` seconds to finish, cancels stragglers,
    closes the channel, lets the aggregator drain it and returns

All state is accessed only from the single asyncio event loop; no
threading primitives are needed.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, TextIO

import httpx

from config.settings import MonitorSettings
from exceptions.base import StartupFatalError
from monitoring.aggregator import Aggregator
from monitoring.endpoint import Endpoint
from monitoring.events import CLOSED
from monitoring.logfile import LogFile
from monitoring.prober import Classifier, EndpointChecker, Prober, status_matches
from utils.logger import get_logger


logger = get_logger("Monitor")


class Monitor:
    """
    Starts one Prober per Endpoint and runs the Aggregator over their
    shared event channel until told to stop.

    Parameters
    ----------
    settings : MonitorSettings
        Timeouts, channel size, shutdown grace.
    alert_manager : AlertManager | None
        Passed on to the Aggregator for ALERT events.
    console : TextIO | None
        Human-readable event stream (stderr by default).
    client : httpx.AsyncClient | None
        If supplied, used instead of a client created by run().
    classifier : Classifier
        Success criterion handed to every prober.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        alert_manager: Any = None,
        console: Optional[TextIO] = None,
        client: Optional[httpx.AsyncClient] = None,
        classifier: Classifier = status_matches,
    ):
        self.settings = settings
        self.alert_manager = alert_manager
        self._console = console
        self._client = client
        self._classifier = classifier

        # --- lifecycle ---
        self._stop_event = asyncio.Event()
        self._running = False
        self._prober_tasks: Dict[str, asyncio.Task] = {}
        self._aggregator: Optional[Aggregator] = None

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def events_written(self) -> int:
        return self._aggregator.written if self._aggregator else 0

    def stop(self) -> None:
        """Ask run() to shut down; safe to call more than once."""
        if not self._stop_event.is_set():
            logger.info("[Monitor] Stop requested")
        self._stop_event.set()

    async def run(self, endpoints: Sequence[Endpoint], log_sink: LogFile) -> None:
        """
        Probe every endpoint concurrently until stop() is called.

        Raises
        ------
        StartupFatalError
            If two endpoints share an identifier.
        """
        self._check_unique(endpoints)

        if self._client is not None:
            await self._supervise(endpoints, log_sink, self._client)
            return

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.request_timeout),
            follow_redirects=self.settings.follow_redirects,
            headers={"User-Agent": self.settings.user_agent},
        ) as client:
            await self._supervise(endpoints, log_sink, client)

    # ------------------------------------------------------------------
    # SUPERVISION
    # ------------------------------------------------------------------

    async def _supervise(
        self,
        endpoints: Sequence[Endpoint],
        log_sink: LogFile,
        client: httpx.AsyncClient,
    ) -> None:
        events: asyncio.Queue = asyncio.Queue(maxsize=self.settings.event_queue_size)
        checker = EndpointChecker(client, timeout=self.settings.request_timeout)

        self._aggregator = Aggregator(
            console=self._console,
            alert_manager=self.alert_manager,
            emoji=self.settings.emoji,
        )
        aggregator_task = asyncio.create_task(
            self._aggregator.run(events, log_sink), name="aggregator"
        )

        for endpoint in endpoints:
            prober = Prober(
                endpoint,
                events,
                checker,
                stop_event=self._stop_event,
                classifier=self._classifier,
            )
            self._prober_tasks[endpoint.identifier] = asyncio.create_task(
                prober.run(), name=f"prober-{endpoint.identifier}"
            )

        self._running = True
        logger.info(f"✓ Monitor started — probing {len(endpoints)} endpoint(s)")

        stop_waiter = asyncio.create_task(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait(
                {stop_waiter, aggregator_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if aggregator_task in done:
                # The aggregator only ends early when writing failed
                self._stop_event.set()
                await self._stop_probers()
                aggregator_task.result()
                return

            await self._stop_probers()
            await events.put(CLOSED)
            written = await aggregator_task
            logger.info(f"✓ Monitor stopped — {written} event(s) written")
        finally:
            stop_waiter.cancel()
            for task in self._prober_tasks.values():
                task.cancel()
            self._prober_tasks.clear()
            if not aggregator_task.done():
                aggregator_task.cancel()
                await asyncio.gather(aggregator_task, return_exceptions=True)
            self._running = False

    async def _stop_probers(self) -> None:
        """Give probers the grace period to stop, then cancel the rest."""
        tasks = list(self._prober_tasks.values())
        self._prober_tasks.clear()
        if not tasks:
            return

        _, pending = await asyncio.wait(tasks, timeout=self.settings.shutdown_grace)
        if pending:
            logger.warning(f"[Monitor] Cancelling {len(pending)} prober(s) after grace period")
            for task in pending:
                task.cancel()

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for task, result in zip(tasks, results):
            if isinstance(result, Exception):
                logger.error(f"[Monitor] {task.get_name()} raised: {result!r}")

    @staticmethod
    def _check_unique(endpoints: Sequence[Endpoint]) -> None:
        seen: List[str] = []
        for endpoint in endpoints:
            if endpoint.identifier in seen:
                raise StartupFatalError(
                    f'duplicate endpoint identifier "{endpoint.identifier}"',
                    component="monitor",
                )
            seen.append(endpoint.identifier)
