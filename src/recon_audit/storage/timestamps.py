"""Epoch-millisecond <-> ISO-8601 conversion used at the remote store boundary."""

from datetime import datetime, timezone
from typing import Union


def ms_to_iso(ms: int) -> str:
    """Epoch milliseconds to an ISO-8601 UTC string with millisecond precision."""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds")


def iso_to_ms(value: Union[str, int, float]) -> int:
    """ISO-8601 string (or an already-numeric epoch ms) to epoch milliseconds.

    Naive timestamps are treated as UTC.
    """
    if isinstance(value, (int, float)):
        return int(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return round(dt.timestamp() * 1000)
