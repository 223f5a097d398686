"""
Per staff member, per shift-month salary math.

Everything here is recomputed from the caller's current snapshot of salary,
advance and overtime records. Nothing is cached between calls.
"""
from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.models.shared.enums import RequestStatus

MAX_ADVANCE_FRACTION = Decimal("0.5")
MIN_ADVANCE_AMOUNT = Decimal("100")
WORKDAYS_PER_MONTH = 26
HOURS_PER_WORKDAY = 8
HOURLY_RATE_DIVISOR = WORKDAYS_PER_MONTH * HOURS_PER_WORKDAY  # 208

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def hourly_rate(monthly_salary: Any) -> Decimal:
    return money(to_decimal(monthly_salary) / HOURLY_RATE_DIVISOR)


@dataclass(frozen=True)
class PayrollBreakdown:
    monthly_salary: Decimal
    total_advances: Decimal
    total_ot: Decimal
    remaining_base_salary: Decimal
    net_salary: Decimal
    max_advance_allowed: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


def aggregate_payroll(
    monthly_salary: Any,
    approved_advances: Iterable[Any],
    approved_ot: Iterable[Any],
) -> PayrollBreakdown:
    """
    Salary breakdown for one shift-month.

    ``approved_advances`` and ``approved_ot`` are amounts already filtered to
    approved records of the month (see ``approved_amounts``).
    """
    salary = to_decimal(monthly_salary)
    total_advances = sum((to_decimal(a) for a in approved_advances), ZERO)
    total_ot = sum((to_decimal(a) for a in approved_ot), ZERO)

    remaining_base_salary = max(salary - total_advances, ZERO)
    net_salary = max(salary + total_ot - total_advances, ZERO)
    max_advance_allowed = min(salary * MAX_ADVANCE_FRACTION, remaining_base_salary)

    return PayrollBreakdown(
        monthly_salary=salary,
        total_advances=total_advances,
        total_ot=total_ot,
        remaining_base_salary=remaining_base_salary,
        net_salary=net_salary,
        max_advance_allowed=max_advance_allowed,
    )


def approved_amounts(records: Iterable[Any], shift_month: str, field: str) -> List[Decimal]:
    """Pick ``field`` from every approved record booked against ``shift_month``."""
    return [
        to_decimal(getattr(r, field))
        for r in records
        if r.status == RequestStatus.APPROVED and r.shift_month == shift_month
    ]


# ---------- Advance admission ----------

class AdvanceRejection(str, Enum):
    ADVANCE_LIMIT_EXHAUSTED = "ADVANCE_LIMIT_EXHAUSTED"
    AMOUNT_EXCEEDS_MAX = "AMOUNT_EXCEEDS_MAX"
    AMOUNT_BELOW_MINIMUM = "AMOUNT_BELOW_MINIMUM"
    PENDING_REQUEST_EXISTS = "PENDING_REQUEST_EXISTS"


ADVANCE_REJECTION_MESSAGES = {
    AdvanceRejection.ADVANCE_LIMIT_EXHAUSTED: "No remaining salary available for advance this month.",
    AdvanceRejection.AMOUNT_EXCEEDS_MAX: "Maximum advance amount is Rs. {max_allowed:,.2f} (50% of salary or remaining balance)",
    AdvanceRejection.AMOUNT_BELOW_MINIMUM: "Minimum advance amount is Rs. {min_amount:,.0f}",
    AdvanceRejection.PENDING_REQUEST_EXISTS: "You already have a pending advance request. Please wait for it to be processed.",
}


def advance_rejection_message(reason: AdvanceRejection, breakdown: PayrollBreakdown) -> str:
    return ADVANCE_REJECTION_MESSAGES[reason].format(
        max_allowed=breakdown.max_advance_allowed,
        min_amount=MIN_ADVANCE_AMOUNT,
    )


def check_advance_admission(
    amount: Any,
    breakdown: PayrollBreakdown,
    has_pending: bool,
) -> Optional[AdvanceRejection]:
    """Return None when a new advance of ``amount`` may be requested."""
    requested = to_decimal(amount)
    if breakdown.remaining_base_salary <= 0:
        return AdvanceRejection.ADVANCE_LIMIT_EXHAUSTED
    if requested > breakdown.max_advance_allowed:
        return AdvanceRejection.AMOUNT_EXCEEDS_MAX
    if requested < MIN_ADVANCE_AMOUNT:
        return AdvanceRejection.AMOUNT_BELOW_MINIMUM
    if has_pending:
        return AdvanceRejection.PENDING_REQUEST_EXISTS
    return None
