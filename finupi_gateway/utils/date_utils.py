"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import Any


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a record timestamp into an aware UTC datetime.

    Accepts datetime, date, ISO-8601 strings (a trailing "Z" included) and
    epoch seconds. Naive values are read as UTC.

    Raises:
        ValueError: If the value cannot be turned into a point in time
    """
    if isinstance(value, bool):
        raise ValueError(f"Unparseable timestamp: {value!r}")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Unparseable timestamp: {value!r}") from e
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unparseable timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def span_in_days(start: datetime, end: datetime) -> float:
    """Fractional days between two points in time (never negative)"""
    return max((end - start).total_seconds() / 86400.0, 0.0)


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    next_month = date(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(from_date.day, last_day))
