"""
Store Package for meow

Endpoint configuration store of the config service, persisted as CSV.
"""

from store.config_store import ConfigStore

__all__ = [
    "ConfigStore",
]
