"""
Append-only event log file, flushed after every line.
"""

from datetime import datetime
from pathlib import Path
from typing import IO, Optional, Union

from config.constants import LOG_FILE_PREFIX, LOG_FILE_TIMESTAMP_FORMAT
from exceptions.base import StartupFatalError
from utils.helpers import TimeHelper


class LogFile:
    """Writes event lines to a file, one line per event."""

    def __init__(self, path: Path, sink: IO[str]):
        self.path = path
        self._sink = sink

    @classmethod
    def open(cls, path: Union[str, Path]) -> "LogFile":
        """
        Create the log file under the given path.

        Raises:
            StartupFatalError: If the file cannot be created
        """
        path = Path(path)
        try:
            sink = path.open("a", encoding="utf-8")
        except OSError as e:
            raise StartupFatalError(
                f"open log file {path}: {e}", component="logfile", cause=e
            ) from e
        return cls(path, sink)

    @staticmethod
    def default_path(directory: Union[str, Path], now: Optional[datetime] = None) -> Path:
        """<directory>/meow-<YYYY-MM-DDTHH-MM-SS>.log"""
        timestamp = TimeHelper.format_datetime(now, LOG_FILE_TIMESTAMP_FORMAT)
        return Path(directory) / f"{LOG_FILE_PREFIX}{timestamp}.log"

    @property
    def closed(self) -> bool:
        return self._sink.closed

    def write_line(self, text: str) -> int:
        """Write the trimmed text plus a newline and flush it."""
        n = self._sink.write(text.strip() + "\n")
        self._sink.flush()
        return n

    def close(self) -> None:
        if not self._sink.closed:
            self._sink.close()

    def __enter__(self) -> "LogFile":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
