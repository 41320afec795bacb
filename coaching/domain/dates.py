"""
ISO-8601 parsing and date anchoring.

Subscription boundaries are calendar dates, task boundaries are
date-times. To compare them without off-by-one-day drift a date is
anchored at midnight: the start boundary is midnight of ``start_date``,
the end date is inclusive, so every task instant must fall before the
midnight that begins the following day.
"""
from datetime import date, datetime, time, timedelta, timezone

from coaching.domain.errors import InvalidDateError


def parse_date(value: date | str, field: str = "date") -> date:
    """Date-only value; a full date-time string is truncated to its date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"{field} is required (YYYY-MM-DD)")
    raw = value.strip()
    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        return to_naive_utc(datetime.fromisoformat(_normalize_z(raw))).date()
    except ValueError:
        raise InvalidDateError(f"{field} is not a valid ISO-8601 date: {value}")


def parse_datetime(value: datetime | date | str, field: str = "datetime") -> datetime:
    """Date-time value normalized to naive UTC; a date-only value means midnight."""
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"{field} is required (ISO-8601)")
    raw = value.strip()
    try:
        if len(raw) == 10:
            return datetime.combine(date.fromisoformat(raw), time.min)
        return to_naive_utc(datetime.fromisoformat(_normalize_z(raw)))
    except ValueError:
        raise InvalidDateError(f"{field} is not a valid ISO-8601 date-time: {value}")


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _normalize_z(raw: str) -> str:
    # Python < 3.11 does not accept the "Z" suffix
    if raw.endswith(("Z", "z")):
        return raw[:-1] + "+00:00"
    return raw


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def end_boundary(d: date) -> datetime:
    """Exclusive upper bound for an inclusive end date."""
    return datetime.combine(d + timedelta(days=1), time.min)
