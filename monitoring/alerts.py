"""
============================================================================
MEOW UPTIME MONITOR - ALERT MANAGER
============================================================================
Delivers ALERT events to a webhook as ``{"text": <message>}``.

Design
------
AlertManager uses an internal asyncio.Queue.  The Aggregator calls
``enqueue_alert()`` which is non-blocking — it simply pushes a payload onto
the queue.  A separate ``_dispatch_loop()`` task pulls items off the queue
one at a time and posts them.

Delivery is fire-and-forget: there is no retry and the outcome is only
logged.  When the queue is full the alert is dropped with a warning;
the event itself is already in the log file.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from config.settings import AlertSettings
from utils.logger import get_logger


logger = get_logger("AlertManager")


# ============================================================================
# ALERT PAYLOAD (internal queue item)
# ============================================================================

@dataclass
class AlertPayload:
    """
    Lightweight payload that travels through the internal queue.
    """
    identifier: str
    text: str
    enqueued_at: float = field(default_factory=time.time)

    def to_json(self) -> Dict[str, Any]:
        return {"text": self.text}


# ============================================================================
# ALERT MANAGER
# ============================================================================

class AlertManager:
    """
    Posts alerts to a webhook in the background.

    Parameters
    ----------
    settings : AlertSettings
        Webhook URL, timeout and queue size.
    client : httpx.AsyncClient | None
        Client used for posting. If None, one is created on start()
        and closed on stop().
    """

    def __init__(self, settings: AlertSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.webhook_url = settings.webhook_url

        # --- internal queue ---
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=settings.queue_size)

        self._client = client
        self._owns_client = client is None

        # --- counters ---
        self._sent = 0
        self._failed = 0
        self._dropped = 0

        # --- lifecycle ---
        self._running = False
        self._dispatch_task: Optional[asyncio.Task] = None

        logger.info(
            f"AlertManager created — queue_size={settings.queue_size}, "
            f"timeout={settings.timeout}s"
        )

    # ------------------------------------------------------------------
    # PUBLIC API
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background dispatch loop."""
        if self._running:
            logger.warning("AlertManager is already running")
            return
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.timeout))
        self._running = True
        self._dispatch_task = asyncio.create_task(self._dispatch_loop(), name="alert-dispatch")
        logger.info("✓ AlertManager started — dispatch loop active")

    async def stop(self) -> None:
        """
        Deliver what is already queued, then stop the dispatch loop.
        Waits at most one webhook timeout for the queue to empty.
        """
        if self._dispatch_task:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=self.settings.timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"[AlertManager] {self._queue.qsize()} alerts still queued on shutdown"
                )
            self._running = False
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None

        self._running = False
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("✓ AlertManager stopped")

    def enqueue_alert(self, identifier: str, text: str) -> bool:
        """
        Non-blocking enqueue of an alert.

        Returns
        -------
        bool
            True if the alert was enqueued, False if the queue is full.
        """
        payload = AlertPayload(identifier=identifier, text=text)
        try:
            self._queue.put_nowait(payload)
            logger.debug(
                f"[AlertManager] Enqueued alert for {identifier}, "
                f"queue_size={self._queue.qsize()}"
            )
            return True
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning(
                f"[AlertManager] Alert queue is full ({self._queue.maxsize}). "
                f"Dropping alert: {text}"
            )
            return False

    # ------------------------------------------------------------------
    # DISPATCH LOOP
    # ------------------------------------------------------------------

    async def _dispatch_loop(self) -> None:
        """Pull alerts off the queue one at a time and post them."""
        logger.info("[AlertManager] Dispatch loop started")
        while self._running:
            payload = await self._queue.get()
            try:
                await self._post(payload)
            finally:
                self._queue.task_done()
        logger.info("[AlertManager] Dispatch loop exited")

    async def _post(self, payload: AlertPayload) -> bool:
        """Post one alert; returns True if the webhook answered 2xx."""
        try:
            response = await self._client.post(self.webhook_url, json=payload.to_json())
        except httpx.HTTPError as e:
            self._failed += 1
            logger.error(
                f"[AlertManager] ✗ Webhook post for {payload.identifier} failed: "
                f"{type(e).__name__}: {e}"
            )
            return False

        if response.is_success:
            self._sent += 1
            logger.info(f"[AlertManager] ✓ Alert sent for {payload.identifier}")
            return True

        self._failed += 1
        logger.warning(
            f"[AlertManager] Webhook answered {response.status_code} "
            f"for alert on {payload.identifier}"
        )
        return False

    # ------------------------------------------------------------------
    # DIAGNOSTIC
    # ------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        """Return current state of the alert manager for diagnostics."""
        return {
            "queue_size": self._queue.qsize(),
            "sent": self._sent,
            "failed": self._failed,
            "dropped": self._dropped,
            "is_running": self._running,
        }
