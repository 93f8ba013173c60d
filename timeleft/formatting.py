"""Text formatting for durations, dates and date/time input."""

from __future__ import annotations

from datetime import datetime, timedelta

PLACEHOLDER = "—"


def format_duration(delta: timedelta | None) -> str:
    """H:MM:SS with unbounded hours. Negative durations keep a leading '-'."""
    if delta is None:
        return PLACEHOLDER

    total_seconds = int(delta.total_seconds())
    sign = "-" if total_seconds < 0 else ""
    total_seconds = abs(total_seconds)

    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours}:{minutes:02d}:{seconds:02d}"


def format_date(dt: datetime | None) -> str:
    if dt is None:
        return ""
    return dt.astimezone().strftime("%Y-%m-%d")


def format_time(dt: datetime | None) -> str:
    if dt is None:
        return PLACEHOLDER
    return dt.astimezone().strftime("%H:%M:%S")


def format_datetime(dt: datetime | None) -> str:
    if dt is None:
        return PLACEHOLDER
    return f"{format_time(dt)}  {format_date(dt)}"


def combine_date_and_time(date_str: str | None, time_str: str | None) -> datetime | None:
    """
    Parse a local date (YYYY-MM-DD) and time (HH:MM or HH:MM:SS) into an
    aware datetime. Returns None if either part is missing or malformed.
    """
    if not date_str or not time_str:
        return None
    try:
        combined = datetime.fromisoformat(f"{date_str.strip()}T{time_str.strip()}")
    except ValueError:
        return None
    return combined.astimezone()
