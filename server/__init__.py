"""
Server Package for meow

HTTP services that sit beside the monitor: the endpoint configuration
service and the canary target.
"""

from server.app import ConfigServer, extract_identifier
from server.canary import CanaryServer

__all__ = [
    "ConfigServer",
    "CanaryServer",
    "extract_identifier",
]
