"""Wall clock and workday boundaries in the configured timezone."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


class Clock:
    """Source of "now" and of calendar-day boundaries.

    Every day boundary in the service is computed here so that the notion of
    "today" follows the configured zone rather than the host's local time.
    """

    def __init__(self, timezone: str = "UTC"):
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def localize(self, moment: datetime) -> datetime:
        """Attach the configured zone to naive input, convert aware input."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def start_of_day(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def day_bounds(self, moment: datetime) -> tuple[datetime, datetime]:
        """Half-open interval [local midnight, next local midnight) containing moment."""
        day = self.localize(moment).date()
        return self.start_of_day(day), self.start_of_day(day + timedelta(days=1))

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock pinned to a moment; tests move it forward explicitly."""

    def __init__(self, moment: datetime, timezone: str = "UTC"):
        super().__init__(timezone)
        self.moment = self.localize(moment)

    def now(self) -> datetime:
        return self.moment

    def advance(self, **delta) -> datetime:
        self.moment = self.moment + timedelta(**delta)
        return self.moment
