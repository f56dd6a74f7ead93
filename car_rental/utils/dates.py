"""Timestamp parsing, formatting and duration arithmetic."""
from datetime import datetime, date, timedelta

import pytz

# dayjs-style unit names accepted by DurationUtility.add
_UNITS = {
    "ms": "milliseconds",
    "millisecond": "milliseconds",
    "milliseconds": "milliseconds",
    "s": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "m": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
}


def parse_timestamp(value) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.
    Supports:
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DD HH:MM:SS' and 'YYYY-MM-DDTHH:MM:SS(.fff)'
      - Above with 'Z' or timezone offsets like '+07:00'
      - datetime/date instances
    Naive values are treated as UTC. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("empty timestamp")
        s_norm = s.replace(" ", "T", 1)
        if s_norm.endswith(("Z", "z")):
            s_norm = s_norm[:-1] + "+00:00"
        dt = datetime.fromisoformat(s_norm)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    # If naive datetime, assume UTC
    if dt.tzinfo is None:
        return pytz.utc.localize(dt)
    try:
        return dt.astimezone(pytz.utc)
    except OverflowError:
        raise ValueError(f"Timestamp out of range: {value!r}") from None


def format_timestamp(value) -> str | None:
    """Render a timestamp as '2022-01-01T07:08:01.871Z'; None stays None."""
    if value is None:
        return None
    dt = parse_timestamp(value)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DurationUtility:
    """Clock and "add duration to timestamp" helper injected into services."""

    def now(self) -> datetime:
        return datetime.now(pytz.utc)

    def add(self, timestamp, amount: float, unit: str = "day") -> datetime:
        key = _UNITS.get((unit or "").strip().lower())
        if key is None:
            raise ValueError(f"Unsupported duration unit: {unit!r}")
        try:
            return parse_timestamp(timestamp) + timedelta(**{key: amount})
        except OverflowError:
            raise ValueError(f"{timestamp!r} + {amount} {unit} is out of range") from None
