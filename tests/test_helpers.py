"""Tests for the duration helpers."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from utils.helpers import DurationHelper, TimeHelper


class TestParseDuration:
    """DurationHelper.parse_nanoseconds / parse."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1s", 1_000_000_000),
            ("300ms", 300_000_000),
            ("1.5h", 5_400_000_000_000),
            ("2h45m", 9_900_000_000_000),
            ("1µs", 1_000),
            ("1us", 1_000),
            ("42ns", 42),
            (".5s", 500_000_000),
            ("-1.5h", -5_400_000_000_000),
            ("0", 0),
        ],
    )
    def test_valid(self, text: str, expected: int) -> None:
        assert DurationHelper.parse_nanoseconds(text) == expected

    @pytest.mark.parametrize("text", ["", "1", "abc", "1x", "s", ".s", "1s2", "-"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            DurationHelper.parse_nanoseconds(text)

    def test_parse_returns_timedelta(self) -> None:
        assert DurationHelper.parse("5m") == timedelta(minutes=5)
        assert DurationHelper.parse("250ms") == timedelta(milliseconds=250)


class TestFormatDuration:
    """DurationHelper.format_nanoseconds / format."""

    @pytest.mark.parametrize(
        ("nanoseconds", "expected"),
        [
            (0, "0s"),
            (42, "42ns"),
            (1_500, "1.5µs"),
            (2_000_000, "2ms"),
            (1_500_000_000, "1.5s"),
            (300_000_000_000, "5m0s"),
            (3_600_000_000_000, "1h0m0s"),
            (5_400_000_000_000, "1h30m0s"),
            (-1_000_000_000, "-1s"),
        ],
    )
    def test_format(self, nanoseconds: int, expected: str) -> None:
        assert DurationHelper.format_nanoseconds(nanoseconds) == expected

    def test_format_timedelta(self) -> None:
        assert DurationHelper.format(timedelta(seconds=1)) == "1s"
        assert DurationHelper.format(timedelta(minutes=5)) == "5m0s"

    def test_formatted_value_parses_back(self) -> None:
        value = timedelta(hours=2, minutes=45, milliseconds=125)
        assert DurationHelper.parse(DurationHelper.format(value)) == value


class TestTimeHelper:
    def test_log_file_timestamp(self) -> None:
        stamp = TimeHelper.format_datetime(datetime(2024, 1, 2, 3, 4, 5))
        assert stamp == "2024-01-02T03-04-05"
