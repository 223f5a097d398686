"""
Shift-day and shift-month arithmetic.

The cafe's business day ends at 18:00 local time, not at midnight. Any instant
at or after 18:00 belongs to the next calendar date's shift-day, so a night
shift that starts on the 31st at 19:00 is booked against the next month.
"""
from datetime import date, datetime, time, timedelta
from typing import Tuple

from app.core.clock import Clock

SHIFT_BOUNDARY_HOUR = 18


class ShiftCalendar:
    def __init__(self, clock: Clock):
        self.clock = clock

    def is_night_shift(self, ts: datetime) -> bool:
        return self.clock.localize(ts).hour >= SHIFT_BOUNDARY_HOUR

    def shift_date(self, ts: datetime) -> date:
        local = self.clock.localize(ts)
        if local.hour >= SHIFT_BOUNDARY_HOUR:
            return local.date() + timedelta(days=1)
        return local.date()

    def shift_month(self, ts: datetime) -> str:
        """Shift-day of ``ts`` truncated to ``YYYY-MM``."""
        return self.shift_date(ts).strftime("%Y-%m")

    def shift_period(self, ts: datetime) -> Tuple[datetime, datetime]:
        """Return the [start, end) window of the shift-day containing ``ts``."""
        return self.period_for(self.shift_date(ts))

    def period_for(self, shift_date: date) -> Tuple[datetime, datetime]:
        # 18:00 on the previous calendar day up to 18:00 on the shift date
        end = datetime.combine(shift_date, time(SHIFT_BOUNDARY_HOUR), tzinfo=self.clock.tz)
        start = datetime.combine(shift_date - timedelta(days=1), time(SHIFT_BOUNDARY_HOUR), tzinfo=self.clock.tz)
        return start, end

    def current_shift_date(self) -> date:
        return self.shift_date(self.clock.now())

    def current_shift_month(self) -> str:
        return self.shift_month(self.clock.now())
