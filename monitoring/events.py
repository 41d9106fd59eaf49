"""
Status events travelling from the probers to the aggregator.
"""

from dataclasses import dataclass
from typing import Final

from config.constants import EventKind


@dataclass(frozen=True)
class Event:
    """One status line emitted by a prober."""
    text: str
    identifier: str
    kind: EventKind

    def decorated(self) -> str:
        """The text prefixed with the emoji of its kind."""
        return f"{EventKind.get_emoji(self.kind)} {self.text}"

    def __str__(self) -> str:
        return self.text


class _Closed:
    def __repr__(self) -> str:
        return "CLOSED"


# Put on the event channel to tell the aggregator no more events follow
CLOSED: Final = _Closed()
