"""
============================================================================
MEOW UPTIME MONITOR - HELPERS UTILITY
============================================================================
Collection of helper functions and utilities.

Durations travel between the monitor, the config service and the CSV
file in a compact unit-suffixed form ("5m0s", "1.5s", "250ms"), so
parsing and formatting follow one grammar exactly.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import re
from datetime import datetime, timedelta
from typing import Optional


# ============================================================================
# DURATION UTILITIES
# ============================================================================

class DurationHelper:
    """
    Unit-suffixed duration parsing and formatting.
    """

    NANOSECOND = 1
    MICROSECOND = 1000 * NANOSECOND
    MILLISECOND = 1000 * MICROSECOND
    SECOND = 1000 * MILLISECOND
    MINUTE = 60 * SECOND
    HOUR = 60 * MINUTE

    UNITS = {
        "ns": NANOSECOND,
        "us": MICROSECOND,
        "µs": MICROSECOND,  # micro sign
        "μs": MICROSECOND,  # greek mu
        "ms": MILLISECOND,
        "s": SECOND,
        "m": MINUTE,
        "h": HOUR,
    }

    _COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?(ns|us|µs|μs|ms|s|m|h)")

    @classmethod
    def parse_nanoseconds(cls, text: str) -> int:
        """
        Parse a duration string into nanoseconds.

        Args:
            text: Duration such as "300ms", "-1.5h" or "2h45m"

        Returns:
            Signed number of nanoseconds

        Raises:
            ValueError: If the string is not a valid duration
        """
        if not isinstance(text, str):
            raise ValueError(f"invalid duration {text!r}")

        raw = text
        sign = 1
        if text[:1] in ("-", "+"):
            sign = -1 if text[0] == "-" else 1
            text = text[1:]

        if text == "0":
            return 0
        if not text:
            raise ValueError(f"invalid duration {raw!r}")

        total = 0
        pos = 0
        while pos < len(text):
            match = cls._COMPONENT.match(text, pos)
            if match is None:
                raise ValueError(f"invalid duration {raw!r}")
            whole, frac, unit = match.groups()
            frac = frac or ""
            if not whole and not frac:
                raise ValueError(f"invalid duration {raw!r}")

            scale = cls.UNITS[unit]
            total += int(whole or "0") * scale
            if frac:
                total += int(frac) * scale // (10 ** len(frac))
            pos = match.end()

        return sign * total

    @classmethod
    def parse(cls, text: str) -> timedelta:
        """Parse a duration string into a timedelta (microsecond precision)."""
        nanoseconds = cls.parse_nanoseconds(text)
        sign = -1 if nanoseconds < 0 else 1
        return sign * timedelta(microseconds=abs(nanoseconds) // cls.MICROSECOND)

    @staticmethod
    def to_nanoseconds(value: timedelta) -> int:
        """Exact nanosecond count of a timedelta."""
        return ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1000

    @classmethod
    def format_nanoseconds(cls, nanoseconds: int) -> str:
        """
        Format nanoseconds in the shortest unit-suffixed form.

        Examples: 0 -> "0s", 1500 -> "1.5µs", 300s -> "5m0s", 1h -> "1h0m0s"
        """
        if nanoseconds == 0:
            return "0s"

        sign = "-" if nanoseconds < 0 else ""
        ns = abs(nanoseconds)

        if ns < cls.SECOND:
            if ns < cls.MICROSECOND:
                return f"{sign}{ns}ns"
            if ns < cls.MILLISECOND:
                return f"{sign}{cls._fraction(ns, cls.MICROSECOND)}µs"
            return f"{sign}{cls._fraction(ns, cls.MILLISECOND)}ms"

        hours, rest = divmod(ns, cls.HOUR)
        minutes, rest = divmod(rest, cls.MINUTE)

        out = f"{cls._fraction(rest, cls.SECOND)}s"
        if hours or minutes:
            out = f"{minutes}m{out}"
        if hours:
            out = f"{hours}h{out}"
        return sign + out

    @classmethod
    def format(cls, value: timedelta) -> str:
        """Format a timedelta as a duration string."""
        return cls.format_nanoseconds(cls.to_nanoseconds(value))

    @staticmethod
    def _fraction(value: int, unit: int) -> str:
        whole, frac = divmod(value, unit)
        if not frac:
            return str(whole)
        digits = len(str(unit)) - 1
        return f"{whole}.{frac:0{digits}d}".rstrip("0")


# ============================================================================
# TIME UTILITIES
# ============================================================================

class TimeHelper:
    """
    Time and date manipulation utilities.
    """

    @staticmethod
    def format_datetime(dt: Optional[datetime] = None, fmt: str = "%Y-%m-%dT%H-%M-%S") -> str:
        """
        Format datetime to string. Defaults to the local time and an
        ISO 8601 layout with colons replaced, safe for file names.
        """
        return (dt or datetime.now()).strftime(fmt)
