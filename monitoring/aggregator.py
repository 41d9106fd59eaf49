"""
============================================================================
MEOW UPTIME MONITOR - EVENT AGGREGATOR
============================================================================
The single consumer of the event channel shared by all probers.

Every event is written exactly once, in the order it was taken off the
channel, to two sinks: a human-readable console stream (stderr) and the
durable event log, which is flushed after each line. ALERT events are
also handed to the AlertManager, which delivers them in the background
so a slow webhook never holds up the channel.

Events of one endpoint keep their relative order because a single
prober emits them sequentially; events of different endpoints
interleave in arrival order.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import sys
from typing import Any, Optional, TextIO

from monitoring.events import CLOSED, Event
from monitoring.logfile import LogFile
from utils.logger import get_logger


logger = get_logger("Aggregator")


class Aggregator:
    """
    Drains the event channel into the console stream and the log sink.

    Parameters
    ----------
    console : TextIO | None
        Human-readable stream, stderr by default.
    alert_manager : AlertManager | None
        If supplied, ALERT events are enqueued for webhook delivery.
    emoji : bool
        Prefix each line with the emoji of its event kind.
    """

    def __init__(
        self,
        console: Optional[TextIO] = None,
        alert_manager: Any = None,
        emoji: bool = False,
    ):
        self._console = console
        self.alert_manager = alert_manager
        self.emoji = emoji
        self.written = 0

    async def run(self, events: asyncio.Queue, log_sink: LogFile) -> int:
        """
        Loop until the channel is closed (CLOSED sentinel) or the task is
        cancelled. Returns the number of events written.
        """
        logger.debug("[Aggregator] Draining event channel")
        while True:
            event = await events.get()
            try:
                if event is CLOSED:
                    break
                self.write(event, log_sink)
            finally:
                events.task_done()

        logger.debug(f"[Aggregator] Channel closed after {self.written} events")
        return self.written

    def write(self, event: Event, log_sink: LogFile) -> None:
        line = event.decorated() if self.emoji else event.text

        console = self._console or sys.stderr
        console.write(line + "\n")
        console.flush()
        log_sink.write_line(line)
        self.written += 1

        if self.alert_manager and event.kind.is_alert:
            self.alert_manager.enqueue_alert(event.identifier, event.text)
