from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.shared.enums import RequestStatus
from app.schemas.hr.staff_schema import StaffInfo

class OvertimeRequestResponse(BaseModel):
    id: int
    staff: StaffInfo
    session_id: int
    status: RequestStatus
    requested_at: datetime
    shift_date: date
    shift_month: str
    regular_hours: Decimal
    ot_hours: Decimal
    ot_amount: Decimal
    is_night_shift: bool
    cross_midnight: bool
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True

class OvertimeStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    total_ot_hours: Decimal
    total_ot_amount: Decimal
    approval_rate: int
    average_ot_hours: Decimal
    average_ot_amount: Decimal
