"""Date and time formatting utilities."""

from datetime import datetime
from typing import Any


def format_date(date: Any) -> str:
    """
    Format a date to a YYYY-MM-DD string.

    Args:
        date: datetime object or Unix timestamp (local time)

    Returns:
        Formatted date string
    """
    if isinstance(date, (int, float)):
        date = datetime.fromtimestamp(date)
    if hasattr(date, "strftime"):
        return date.strftime("%Y-%m-%d")
    return str(date)


def format_relative_time(timestamp: int, now: int) -> str:
    """
    Format a Unix timestamp relative to ``now``.

    Args:
        timestamp: Unix seconds; 0 means unknown
        now: Current Unix seconds

    Returns:
        "N/A", "now", "<N>m ago", "<N>h ago", or the date for anything older than a day
    """
    if timestamp == 0:
        return "N/A"

    elapsed = now - timestamp
    if elapsed < 60:
        return "now"
    if elapsed < 3600:
        return f"{elapsed // 60}m ago"
    if elapsed < 86400:
        return f"{elapsed // 3600}h ago"
    return format_date(timestamp)
