"""
============================================================================
MEOW UPTIME MONITOR - SHUTDOWN COORDINATOR
============================================================================
Turns SIGINT / SIGTERM into an orderly shutdown:

    stop monitor (probers, then aggregator drain) → stop alert manager →
    close event log → release the main control path

Each step is wrapped so a failure in one component doesn't prevent the
others from cleaning up.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import signal
from typing import Any, List, Optional, Sequence

from exceptions.base import MeowException, ShutdownError
from monitoring.logfile import LogFile
from monitoring.monitor import Monitor
from utils.logger import get_logger


logger = get_logger("Shutdown")


class ShutdownCoordinator:
    """
    Waits for a termination signal (or for the monitor to end on its
    own) and then releases every resource of the run.

    Parameters
    ----------
    monitor : Monitor
        The running supervisor.
    monitor_task : asyncio.Task
        The task executing ``monitor.run()``.
    log_sink : LogFile
        Event log, closed last.
    alert_manager : AlertManager | None
        Stopped after the monitor so queued alerts can still go out.
    """

    def __init__(
        self,
        monitor: Monitor,
        monitor_task: "asyncio.Task[None]",
        log_sink: LogFile,
        alert_manager: Any = None,
        signals: Sequence[int] = (signal.SIGINT, signal.SIGTERM),
    ):
        self.monitor = monitor
        self.monitor_task = monitor_task
        self.log_sink = log_sink
        self.alert_manager = alert_manager
        self.signals = tuple(signals)
        self.received_signal: Optional[int] = None

        self._requested = asyncio.Event()
        self._installed: List[int] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    # ------------------------------------------------------------------
    # SIGNAL HANDLING
    # ------------------------------------------------------------------

    def install(self) -> List[int]:
        """
        Install handlers on the running loop. Signal handlers aren't
        supported on Windows or in some restricted environments; those
        signals are skipped (Ctrl+C then surfaces as KeyboardInterrupt).
        """
        self._loop = asyncio.get_running_loop()
        for sig in self.signals:
            try:
                self._loop.add_signal_handler(sig, self.request_shutdown, sig)
                self._installed.append(sig)
            except (NotImplementedError, OSError, RuntimeError):
                logger.debug(f"Signal handler for {sig} not supported here")
        return list(self._installed)

    def uninstall(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
        self._installed.clear()

    def request_shutdown(self, sig: Optional[int] = None) -> None:
        if sig is not None:
            self.received_signal = sig
            logger.info(f"⚡ Signal {signal.Signals(sig).name} received — initiating graceful shutdown…")
        self._requested.set()

    @property
    def shutdown_requested(self) -> bool:
        return self._requested.is_set()

    # ------------------------------------------------------------------
    # WAIT + TEARDOWN
    # ------------------------------------------------------------------

    async def wait(self) -> None:
        """
        Block until shutdown is requested or the monitor ends, then tear
        everything down. Re-raises the monitor's exception, if any, after
        all resources are released; errors outside the MeowException
        hierarchy are wrapped in ShutdownError.
        """
        waiter = asyncio.create_task(self._requested.wait())
        try:
            await asyncio.wait({waiter, self.monitor_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        failure: Optional[BaseException] = None

        # 1. Stop monitor (probers stop, aggregator drains the channel)
        self.monitor.stop()
        try:
            await self.monitor_task
            logger.info("✓ Monitor drained")
        except asyncio.CancelledError:
            logger.warning("Monitor task was cancelled")
        except MeowException as e:
            logger.error(f"✗ Monitor ended with error: {e}")
            failure = e
        except Exception as e:
            logger.error(f"✗ Monitor ended with error: {e}")
            failure = ShutdownError(f"monitor: {e}", component="monitor", cause=e)

        # 2. Stop alert manager (delivers what is queued)
        if self.alert_manager:
            try:
                await self.alert_manager.stop()
            except Exception as e:
                logger.error(f"✗ AlertManager stop error: {e}")

        # 3. Close the event log
        try:
            self.log_sink.close()
            logger.info(f"✓ Event log {self.log_sink.path} closed")
        except OSError as e:
            logger.error(f"✗ Closing event log failed: {e}")
            if failure is None:
                failure = ShutdownError(
                    f"close event log {self.log_sink.path}: {e}",
                    component="logfile",
                    cause=e,
                )

        self.uninstall()

        if failure is not None:
            raise failure
