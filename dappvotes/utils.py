"""Display helpers for addresses and poll timestamps."""

from datetime import datetime, timezone, tzinfo

DAYS_OF_WEEK = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def truncate(text: str, start_chars: int, end_chars: int, max_length: int) -> str:
    """
    Shorten ``text`` to its head and tail, padding the head with dots.

    >>> truncate("0x1234567890abcdef", 4, 4, 11)
    '0x12...cdef'
    """
    if len(text) <= max_length:
        return text
    start = text[:start_chars]
    end = text[len(text) - end_chars :] if end_chars > 0 else ""
    if len(start) + len(end) < max_length:
        start += "." * (max_length - len(start) - len(end))
    return start + end


def _from_ms(timestamp_ms: int, tz: tzinfo) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)


def format_date(timestamp_ms: int) -> str:
    """Render epoch milliseconds as ``Sun, Jan 5, 2025`` (UTC)."""
    date = _from_ms(timestamp_ms, timezone.utc)
    return f"{DAYS_OF_WEEK[date.weekday()]}, {MONTHS[date.month - 1]} {date.day}, {date.year}"


def format_timestamp(timestamp_ms: int, tz: tzinfo = timezone.utc) -> str:
    """Render epoch milliseconds as a ``YYYY-MM-DDTHH:MM`` form value."""
    return _from_ms(timestamp_ms, tz).strftime("%Y-%m-%dT%H:%M")
