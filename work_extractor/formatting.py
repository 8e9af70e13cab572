"""
Formatting helpers shared by the projectors and the console presenters.

None of these functions raise on bad input: an unparseable timestamp passes
through unchanged, and an absent value renders as NOT_AVAILABLE.
"""

from datetime import datetime
from typing import Iterable, Optional

NOT_AVAILABLE = "N/A"

LINEAR_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
GITHUB_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp ("2025-03-04T10:20:30.123Z").

    Returns None unless the value carries both a time and a UTC offset.
    """
    if not isinstance(value, str) or "T" not in value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def format_timestamp(value: str, fmt: str = LINEAR_TIMESTAMP_FORMAT) -> str:
    """Reformat a wire timestamp for humans, or return it unchanged.

    The wall-clock time is kept in the offset it was sent with.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime(fmt)


def format_optional_timestamp(value: Optional[str], fmt: str = LINEAR_TIMESTAMP_FORMAT) -> Optional[str]:
    if value is None:
        return None
    return format_timestamp(value, fmt)


def format_whole_number(value: float) -> str:
    return f"{value:.0f}"


def or_placeholder(value: Optional[str]) -> str:
    return NOT_AVAILABLE if value is None else value


def join_labels(names: Iterable[str], delimiter: str) -> str:
    return delimiter.join(names)


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len, ending in "..." when something was cut."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[:max_len - 3] + "..."


def clip(text: str, max_len: int) -> str:
    return text[:max_len]


def format_month_range(start: str, end: str) -> str:
    """Render a date range as "January 2025 - February 2026".

    Falls back to the raw values when either end cannot be parsed.
    """
    parsed_start = parse_timestamp(start) or _parse_date(start)
    parsed_end = parse_timestamp(end) or _parse_date(end)
    if parsed_start is None or parsed_end is None:
        return f"{start} - {end}"
    return f"{parsed_start.strftime('%B %Y')} - {parsed_end.strftime('%B %Y')}"


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d")
    except (TypeError, ValueError):
        return None
