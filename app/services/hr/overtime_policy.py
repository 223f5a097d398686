import logging
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from app.core.exceptions import ComputationFault, InvalidDurationError
from app.utils.shift_calendar import ShiftCalendar

logger = logging.getLogger(__name__)

REGULAR_HOURS_CAP = 12
OVERTIME_RATE_PER_HOUR = 200

Timestamp = Union[datetime, str, int, float]


@dataclass(frozen=True)
class OvertimeBreakdown:
    hours_worked: float
    regular_hours: float
    ot_hours: float
    ot_amount: float
    has_ot: bool
    is_night_shift: bool
    cross_midnight: bool

    @classmethod
    def zero(cls) -> "OvertimeBreakdown":
        return cls(
            hours_worked=0.0,
            regular_hours=0.0,
            ot_hours=0.0,
            ot_amount=0.0,
            has_ot=False,
            is_night_shift=False,
            cross_midnight=False,
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OvertimeResult:
    """
    Outcome of an overtime computation.

    On a fault the breakdown is zeroed and ``fault`` is set; callers must check
    ``ok`` (or use ``unwrap``) before writing anything derived from it.
    """
    breakdown: OvertimeBreakdown
    fault: Optional[ComputationFault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None

    def unwrap(self) -> OvertimeBreakdown:
        if self.fault is not None:
            raise self.fault
        return self.breakdown


def parse_timestamp(value: Timestamp, field: str = "timestamp") -> datetime:
    """Accept a datetime, an ISO-8601 string or epoch seconds."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidDurationError(f"Invalid {field}: {value!r}") from e
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidDurationError(f"Invalid {field}: {value!r}") from e
    raise InvalidDurationError(f"Invalid {field}: {value!r}")


class OvertimePolicy:
    """Splits a closed session into regular and overtime hours and prices the overtime."""

    def __init__(self, calendar: ShiftCalendar):
        self.calendar = calendar

    def compute_overtime(self, clock_in: Timestamp, clock_out: Timestamp) -> OvertimeResult:
        for field, value in (("clock_in", clock_in), ("clock_out", clock_out)):
            if isinstance(value, float) and not math.isfinite(value):
                return self._fault(f"{field} is not a finite number: {value!r}")

        start = self.calendar.clock.localize(parse_timestamp(clock_in, "clock_in"))
        end = self.calendar.clock.localize(parse_timestamp(clock_out, "clock_out"))

        hours_worked = (end - start).total_seconds() / 3600
        if not math.isfinite(hours_worked):
            return self._fault(f"hours worked is not finite: {hours_worked!r}")
        if hours_worked <= 0:
            raise InvalidDurationError(
                f"Clock-out {end.isoformat()} must be after clock-in {start.isoformat()}"
            )

        regular_hours = min(max(hours_worked, 0.0), REGULAR_HOURS_CAP)
        ot_hours = max(hours_worked - REGULAR_HOURS_CAP, 0.0)
        ot_amount = ot_hours * OVERTIME_RATE_PER_HOUR
        if not (math.isfinite(regular_hours) and math.isfinite(ot_amount)):
            return self._fault("overtime amount is not finite")

        return OvertimeResult(
            OvertimeBreakdown(
                hours_worked=hours_worked,
                regular_hours=regular_hours,
                ot_hours=ot_hours,
                ot_amount=ot_amount,
                has_ot=ot_hours > 0,
                is_night_shift=self.calendar.is_night_shift(start),
                # plain calendar dates, not shift dates
                cross_midnight=end.date() != start.date(),
            )
        )

    @staticmethod
    def _fault(message: str) -> OvertimeResult:
        logger.error(f"Overtime computation fault: {message}")
        return OvertimeResult(OvertimeBreakdown.zero(), ComputationFault(message))
