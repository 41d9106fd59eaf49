"""
============================================================================
MEOW UPTIME MONITOR - MAIN APPLICATION
============================================================================
Entry point for the three meow programs:

    monitor        (default) fetch endpoints from CONFIG_URL and probe them
    config-server  serve and persist the endpoint configuration
    canary         an always-up target for trying the monitor out

Monitor Startup Order
---------------------
1.  Load settings & configure logging
2.  Fetch endpoint definitions from the config service
3.  Open the event log in the temp directory
4.  Start the AlertManager (only if a webhook is configured)
5.  Start the Monitor task
6.  Install SIGINT / SIGTERM handlers and wait

Shutdown Order
--------------
On SIGINT or SIGTERM:
    stop probers → drain aggregator → stop alert manager →
    close event log → exit

Any startup failure is logged and terminates the process with status 1
before a single prober runs.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from config.settings import Settings, get_settings
from exceptions.base import ConfigurationError, MeowException
from monitoring.alerts import AlertManager
from monitoring.endpoint import Endpoint
from monitoring.logfile import LogFile
from monitoring.monitor import Monitor
from monitoring.shutdown import ShutdownCoordinator
from monitoring.source import fetch_endpoints
from server.app import ConfigServer
from server.canary import CanaryServer
from store.config_store import ConfigStore
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# MONITOR APPLICATION
# ============================================================================

class MeowApplication:
    """
    Top-level orchestrator of the monitor.

    Owns every subsystem and is the single place that knows the startup
    and shutdown order.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        # --- subsystems (populated during startup) ---
        self.endpoints: List[Endpoint] = []
        self.log_file: Optional[LogFile] = None
        self.alert_manager: Optional[AlertManager] = None
        self.monitor: Optional[Monitor] = None

    # ==================================================================
    # PHASE 1: ENDPOINTS
    # ==================================================================

    async def _fetch_endpoints(self) -> None:
        logger.info("── Phase 1: Endpoints ────────────────────────────")
        config_url = self.settings.source.config_url
        if not config_url:
            raise ConfigurationError(
                "environment variable CONFIG_URL must be set",
                config_key="CONFIG_URL",
            )
        self.endpoints = await fetch_endpoints(
            config_url, timeout=self.settings.source.fetch_timeout
        )
        for endpoint in self.endpoints:
            logger.info(f"  • {endpoint}")

    # ==================================================================
    # PHASE 2: EVENT LOG
    # ==================================================================

    def _open_log_file(self) -> None:
        logger.info("── Phase 2: Event Log ────────────────────────────")
        path = LogFile.default_path(self.settings.monitor.log_dir)
        self.log_file = LogFile.open(path)
        logger.info(f"started logging to {path}")

    # ==================================================================
    # PHASE 3: ALERTS
    # ==================================================================

    async def _start_alerts(self) -> None:
        logger.info("── Phase 3: Alerts ───────────────────────────────")
        if not self.settings.alert.enabled:
            logger.info("  No ALERT_WEBHOOK_URL configured — alerts go to the event log only")
            return
        self.alert_manager = AlertManager(self.settings.alert)
        await self.alert_manager.start()

    # ==================================================================
    # RUN
    # ==================================================================

    async def run(self) -> None:
        """
        Start up, then block until a termination signal arrives or the
        monitor ends on its own.

        Raises:
            ConfigurationError: If CONFIG_URL is not set
            StartupFatalError: If endpoints or the event log are unavailable
        """
        await self._fetch_endpoints()
        self._open_log_file()
        try:
            await self._start_alerts()
        except Exception:
            self.log_file.close()
            raise

        self.monitor = Monitor(self.settings.monitor, alert_manager=self.alert_manager)
        monitor_task = asyncio.create_task(
            self.monitor.run(self.endpoints, self.log_file), name="monitor"
        )

        coordinator = ShutdownCoordinator(
            self.monitor,
            monitor_task,
            self.log_file,
            alert_manager=self.alert_manager,
        )
        coordinator.install()

        logger.info("=" * 74)
        logger.info(f"  ✓ {self.settings.app_name} v{self.settings.app_version} probing "
                    f"{len(self.endpoints)} endpoint(s)")
        logger.info("=" * 74)

        await coordinator.wait()
        logger.info("  ✓ SHUTDOWN COMPLETE")


# ============================================================================
# SERVICES
# ============================================================================

async def _wait_for_signal() -> None:
    """Block until SIGINT or SIGTERM is received."""
    loop = asyncio.get_running_loop()
    received = asyncio.Event()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, received.set)
            installed.append(sig)
        except (NotImplementedError, OSError, RuntimeError):
            logger.debug(f"Signal handler for {sig} not supported here")
    try:
        await received.wait()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def run_config_server(settings: Settings) -> None:
    store = ConfigStore.load(settings.server.file)
    server = ConfigServer(settings.server, store)
    await server.start()
    try:
        await _wait_for_signal()
    finally:
        await server.stop()


async def run_canary(bind: str, port: int) -> None:
    canary = CanaryServer(bind, port)
    await canary.start()
    try:
        await _wait_for_signal()
    finally:
        await canary.stop()


# ============================================================================
# COMMAND LINE
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meow",
        description="Uptime monitor probing HTTP endpoints",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("monitor", help="probe the endpoints served at CONFIG_URL (default)")

    config_server = subparsers.add_parser("config-server", help="serve the endpoint configuration")
    config_server.add_argument("--addr", help="listen to address")
    config_server.add_argument("--port", type=int, help="listen on port")
    config_server.add_argument("--file", help="CSV file to store the configuration")

    canary = subparsers.add_parser("canary", help="serve an always-up /canary target")
    canary.add_argument("--bind", help="bind to")
    canary.add_argument("--port", type=int, help="port number")

    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command line flags taking precedence."""
    server_update = {}
    if args.command == "config-server":
        if args.addr is not None:
            server_update["addr"] = args.addr
        if args.port is not None:
            server_update["port"] = args.port
        if args.file is not None:
            server_update["file"] = Path(args.file)
    elif args.command == "canary":
        if args.bind is not None:
            server_update["addr"] = args.bind
        if args.port is not None:
            server_update["canary_port"] = args.port

    if not server_update:
        return settings
    server = settings.server.model_copy(update=server_update)
    return settings.model_copy(update={"server": server})


async def _dispatch(command: str, settings: Settings) -> None:
    if command == "config-server":
        await run_config_server(settings)
    elif command == "canary":
        await run_canary(settings.server.addr, settings.server.canary_port)
    else:
        await MeowApplication(settings).run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    command = args.command or "monitor"

    settings = apply_overrides(get_settings(), args)
    setup_logging(settings.logging)

    try:
        asyncio.run(_dispatch(command, settings))
    except KeyboardInterrupt:
        logger.info("  ⚡ KeyboardInterrupt received")
    except MeowException as e:
        logger.bind(error=e.to_dict()).error(f"  ✗ {e.log_format()}")
        return 1
    return 0


# ============================================================================
# SCRIPT ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    sys.exit(main())
