"""
============================================================================
MEOW UPTIME MONITOR - CONFIG STORE
============================================================================
Holds the endpoint configuration of the config service and persists it
as CSV, one record per line in the order identifier, url, method,
status_online, frequency, fail_after.

Concurrency
-----------
Readers get the current snapshot, an immutable mapping that is replaced
(never mutated) by writers, so reads never wait. Writers are serialized
by an asyncio.Lock; a write is visible to every read that starts after
it returns. The file is rewritten atomically (temp file + rename) on
every successful write.

If persisting fails, the in-memory snapshot already holds the new value
and PersistenceError is raised; the caller answers with a server error.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import csv
import os
import tempfile
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from exceptions.base import StartupFatalError
from exceptions.store import PersistenceError
from exceptions.validation import EndpointValidationError
from monitoring.endpoint import Endpoint
from utils.logger import get_logger


logger = get_logger("ConfigStore")


class ConfigStore:
    """
    Single owner of the endpoint configuration.

    Use ``ConfigStore.load(path)`` to read an existing CSV file.
    """

    def __init__(self, path: Union[str, Path], endpoints: Optional[Mapping[str, Endpoint]] = None):
        self.path = Path(path)
        self._snapshot: Mapping[str, Endpoint] = MappingProxyType(dict(endpoints or {}))
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # LOADING
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ConfigStore":
        """
        Read the CSV file. A missing file yields an empty store; a
        malformed file is fatal.
        """
        path = Path(path)
        if not path.exists():
            logger.info(f'The config file "{path}" does not exist — starting empty')
            return cls(path)

        endpoints = {}
        try:
            with path.open(newline="", encoding="utf-8") as f:
                for line, record in enumerate(csv.reader(f), start=1):
                    if not record:
                        continue
                    endpoint = Endpoint.from_record(record)
                    endpoints[endpoint.identifier] = endpoint
        except EndpointValidationError as e:
            raise StartupFatalError(
                f'the config file "{path}" is malformed: line {line}: {e}',
                component="store",
                cause=e,
            ) from e
        except (OSError, csv.Error) as e:
            raise StartupFatalError(
                f'the config file "{path}" is malformed: {e}',
                component="store",
                cause=e,
            ) from e

        logger.info(f'Loaded {len(endpoints)} endpoint(s) from "{path}"')
        return cls(path, endpoints)

    # ------------------------------------------------------------------
    # READS
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> Optional[Endpoint]:
        return self._snapshot.get(identifier)

    def list(self) -> List[Endpoint]:
        """All endpoints, ordered by identifier."""
        snapshot = self._snapshot
        return [snapshot[key] for key in sorted(snapshot)]

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._snapshot

    # ------------------------------------------------------------------
    # WRITES
    # ------------------------------------------------------------------

    async def upsert(self, endpoint: Endpoint) -> bool:
        """
        Insert or replace an endpoint and persist the configuration.

        Returns:
            True if the endpoint was created, False if it was updated

        Raises:
            PersistenceError: If the file could not be written
        """
        async with self._write_lock:
            created = endpoint.identifier not in self._snapshot
            updated = dict(self._snapshot)
            updated[endpoint.identifier] = endpoint
            self._snapshot = MappingProxyType(updated)

            records = [e.to_record() for e in self.list()]
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._write_records, records)

        logger.info(f"{'Created' if created else 'Updated'} endpoint {endpoint.identifier}")
        return created

    def _write_records(self, records: List[List[str]]) -> None:
        directory = self.path.parent if str(self.path.parent) else Path(".")
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerows(records)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(
                f'write config "{self.path}": {e}', path=self.path, cause=e
            ) from e
