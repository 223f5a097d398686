from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from app.core.config import settings


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware (UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:  # naive → assume UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Clock:
    """
    Time source plus the cafe's local time zone.

    Everything that needs "now" or a local wall-clock hour takes a Clock
    instead of reading process time, so tests can pin both.
    """

    def __init__(self, tz: tzinfo, now_fn: Optional[Callable[[], datetime]] = None):
        self.tz = tz
        self._now_fn = now_fn

    def now(self) -> datetime:
        if self._now_fn is not None:
            return self.localize(self._now_fn())
        return datetime.now(self.tz)

    def localize(self, ts: datetime) -> datetime:
        """Aware timestamps are converted; naive ones are taken as local wall time."""
        if ts.tzinfo is None:
            return ts.replace(tzinfo=self.tz)
        return ts.astimezone(self.tz)


def get_clock() -> Clock:
    return Clock(ZoneInfo(settings.TIMEZONE))
