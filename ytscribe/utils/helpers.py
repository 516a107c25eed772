"""
Helper utility functions for the ytscribe transcript service.
"""

import re
import datetime
from typing import Optional


def get_timestamp() -> str:
    """
    Get the current UTC time as an ISO 8601 string.

    Returns:
        Timestamp such as ``2024-05-01T10:00:00+00:00``
    """
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat()


def get_iso_date(value: Optional[str] = None) -> str:
    """
    Get the date part of an ISO timestamp, or today's date.

    Args:
        value: ISO date or datetime string

    Returns:
        ``YYYY-MM-DD``
    """
    if value:
        return value[:10]
    return datetime.datetime.now(datetime.timezone.utc).date().isoformat()


def seconds_to_minutes(seconds) -> int:
    """Floor-divide a duration in seconds into whole minutes."""
    return int(seconds or 0) // 60


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return re.sub(r"\r\n?", "\n", text or "")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join((text or "").split())


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
