"""
Clock - the single source of "now" for the engine.

All datetimes inside the engine are naive UTC; ``today()`` is the calendar
day in the configured timezone and drives day-granular rules (expiration).
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


class Clock:
    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall clock"""

    def __init__(self, tz_name: str = "UTC"):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """Frozen clock for tests and replays"""

    def __init__(self, now: datetime, today: date | None = None):
        self._now = now
        self._today = today

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._today or self._now.date()

    def advance_to(self, now: datetime, today: date | None = None) -> None:
        self._now = now
        self._today = today
