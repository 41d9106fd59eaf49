"""
============================================================================
MEOW UPTIME MONITOR - MONITORING PACKAGE
============================================================================
Runtime monitoring infrastructure:
    • Endpoint           — what to check and how to judge the answer
    • Prober             — one periodic checker per endpoint
    • Aggregator         — single writer of console, event log and alerts
    • Monitor            — supervisor owning probers and aggregator
    • ShutdownCoordinator — signal driven orderly teardown
    • AlertManager       — webhook delivery of ALERT events
    • fetch_endpoints    — endpoint list from the config service

File layout
-----------
monitoring/
├── __init__.py          ← this file
├── endpoint.py          ← Endpoint model + record / payload / JSON forms
├── events.py            ← Event + channel close marker
├── prober.py            ← ProberState, EndpointChecker, Prober
├── logfile.py           ← LogFile
├── aggregator.py        ← Aggregator
├── monitor.py           ← Monitor
├── shutdown.py          ← ShutdownCoordinator
├── alerts.py            ← AlertManager
└── source.py            ← fetch_endpoints

============================================================================
"""

from monitoring.endpoint import Endpoint
from monitoring.events import CLOSED, Event
from monitoring.prober import (
    Classifier,
    EndpointChecker,
    ProbeOutcome,
    Prober,
    ProberState,
    status_matches,
)
from monitoring.logfile import LogFile
from monitoring.aggregator import Aggregator
from monitoring.alerts import AlertManager, AlertPayload
from monitoring.monitor import Monitor
from monitoring.shutdown import ShutdownCoordinator
from monitoring.source import fetch_endpoints

__all__ = [
    # Model
    "Endpoint",
    "Event",
    "CLOSED",

    # Probing
    "Classifier",
    "EndpointChecker",
    "ProbeOutcome",
    "Prober",
    "ProberState",
    "status_matches",

    # Aggregation
    "LogFile",
    "Aggregator",

    # Alerts
    "AlertManager",
    "AlertPayload",

    # Supervision
    "Monitor",
    "ShutdownCoordinator",
    "fetch_endpoints",
]
