"""Tests for work_extractor.formatting."""

import pytest

from work_extractor.formatting import (
    GITHUB_TIMESTAMP_FORMAT,
    format_month_range,
    format_optional_timestamp,
    format_timestamp,
    format_whole_number,
    truncate,
)


@pytest.mark.parametrize("raw,expected", [
    ("2025-03-04T10:20:30Z", "2025-03-04 10:20:30"),
    ("2025-03-04T10:20:30.123Z", "2025-03-04 10:20:30"),
    ("2025-03-04T10:20:30+02:00", "2025-03-04 10:20:30"),
])
def test_format_timestamp(raw, expected):
    assert format_timestamp(raw) == expected


def test_github_timestamp_format_drops_seconds():
    assert format_timestamp("2025-03-04T10:20:30Z", GITHUB_TIMESTAMP_FORMAT) == "2025-03-04 10:20"


@pytest.mark.parametrize("raw", ["not a date", "2025-03-04", "2025-03-04T10:20:30", ""])
def test_unparseable_timestamp_passes_through(raw):
    assert format_timestamp(raw) == raw


def test_optional_timestamp_absent():
    assert format_optional_timestamp(None) is None


@pytest.mark.parametrize("value,expected", [(3.0, "3"), (0.0, "0"), (5.0, "5"), (2.5, "2")])
def test_format_whole_number(value, expected):
    assert format_whole_number(value) == expected


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a" * 60, 50) == "a" * 47 + "..."
    assert len(truncate("a" * 60, 50)) == 50
    assert truncate("abcdef", 3) == "abc"


def test_format_month_range():
    assert format_month_range("2025-01-01T00:00:00.000Z", "2026-02-28T23:59:59.999Z") == \
        "January 2025 - February 2026"
    assert format_month_range("soon", "later") == "soon - later"
