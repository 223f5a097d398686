from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.shared.enums import SessionStatus
from app.schemas.hr.staff_schema import StaffInfo

class LocationPayload(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

class LocationCheckResponse(BaseModel):
    allowed: bool
    distance: float
    max_distance: float
    message: str

class WorkSessionResponse(BaseModel):
    id: int
    staff: StaffInfo
    clock_in: datetime
    clock_out: Optional[datetime] = None
    status: SessionStatus
    shift_date: date
    shift_month: str
    is_night_shift: bool
    cross_midnight: Optional[bool] = None
    total_hours: Optional[Decimal] = None
    regular_hours: Optional[Decimal] = None
    ot_hours: Optional[Decimal] = None
    ot_amount: Optional[Decimal] = None
    clock_in_distance: Optional[Decimal] = None
    clock_out_distance: Optional[Decimal] = None

    class Config:
        from_attributes = True

class ClockOutResponse(BaseModel):
    session: WorkSessionResponse
    hours_worked: float
    has_ot: bool
    overtime_request_id: Optional[int] = None

class CurrentShiftResponse(BaseModel):
    shift_date: date
    period_start: datetime
    period_end: datetime
    is_clocked_in: bool
    active_session: Optional[WorkSessionResponse] = None
    total_hours: float
    sessions: List[WorkSessionResponse]

class StaffShiftSummary(BaseModel):
    staff_id: int
    staff_code: str
    full_name: str
    sessions: int
    total_hours: float
    ot_hours: float
    night_shifts: int
    last_activity: datetime

class LongRunningSession(BaseModel):
    session_id: int
    staff_code: str
    full_name: str
    clock_in: datetime
    hours_open: float

class ShiftDaySummaryResponse(BaseModel):
    shift_date: date
    total_sessions: int
    ot_sessions: int
    total_overtime_hours: float
    staff: List[StaffShiftSummary]
    active_staff: List[WorkSessionResponse]
    long_running: List[LongRunningSession] = []

class SessionDeleteResponse(BaseModel):
    message: str
    deleted: int
