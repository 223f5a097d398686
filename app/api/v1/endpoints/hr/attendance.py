from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import CurrentUser, get_current_staff, get_distance_gate, get_shift_calendar, require_admin
from app.core.database import get_async_session
from app.models.hr.staff import Staff
from app.models.shared.enums import SessionStatus
from app.schemas.common.pagination import PaginatedResponse
from app.schemas.hr.attendance_schema import (
    ClockOutResponse,
    CurrentShiftResponse,
    LocationCheckResponse,
    LocationPayload,
    SessionDeleteResponse,
    ShiftDaySummaryResponse,
    WorkSessionResponse,
)
from app.services.hr.attendance_service import AttendanceService
from app.utils.geo import DistanceGate
from app.utils.shift_calendar import ShiftCalendar

router = APIRouter()

def get_attendance_service(
    session: AsyncSession = Depends(get_async_session),
    calendar: ShiftCalendar = Depends(get_shift_calendar),
    gate: DistanceGate = Depends(get_distance_gate),
) -> AttendanceService:
    return AttendanceService(session, calendar, gate)

@router.post("/check-location", response_model=LocationCheckResponse)
async def check_location(
    location: LocationPayload,
    service: AttendanceService = Depends(get_attendance_service),
    staff: Staff = Depends(get_current_staff)
):
    """Check whether the reported position is close enough to the cafe"""
    check = service.check_location(location.latitude, location.longitude)
    return {
        "allowed": check.allowed,
        "distance": round(check.distance, 1),
        "max_distance": check.max_meters,
        "message": check.message,
    }

@router.post("/clock-in", response_model=WorkSessionResponse)
async def clock_in(
    location: LocationPayload,
    service: AttendanceService = Depends(get_attendance_service),
    staff: Staff = Depends(get_current_staff)
):
    """Start a work session (location verified)"""
    return await service.clock_in(staff, location)

@router.post("/clock-out", response_model=ClockOutResponse)
async def clock_out(
    location: LocationPayload,
    service: AttendanceService = Depends(get_attendance_service),
    staff: Staff = Depends(get_current_staff)
):
    """Close the open work session and calculate overtime"""
    return await service.clock_out(staff, location)

@router.get("/current-shift", response_model=CurrentShiftResponse)
async def get_current_shift(
    service: AttendanceService = Depends(get_attendance_service),
    staff: Staff = Depends(get_current_staff)
):
    """Sessions of the caller's current shift-day"""
    return await service.get_current_shift_sessions(staff)

@router.get("/sessions", response_model=PaginatedResponse[WorkSessionResponse])
async def get_sessions(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    staff_id: Optional[int] = Query(None),
    shift_date: Optional[date] = Query(None),
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    status: Optional[SessionStatus] = Query(None),
    service: AttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get work sessions with filtering and pagination"""
    return await service.get_sessions(
        page_index=page_index,
        page_size=page_size,
        staff_id=staff_id,
        shift_date=shift_date,
        shift_month=shift_month,
        session_status=status
    )

@router.get("/summary", response_model=ShiftDaySummaryResponse)
async def get_shift_day_summary(
    shift_date: Optional[date] = Query(None, description="Shift date, defaults to the current one"),
    service: AttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Per-staff hours, OT and night shifts for one shift-day"""
    return await service.get_shift_day_summary(shift_date)

@router.delete("/sessions", response_model=SessionDeleteResponse)
async def delete_sessions(
    session_ids: List[int] = Query(..., min_length=1),
    service: AttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Delete selected work sessions"""
    deleted = await service.delete_sessions(session_ids, current_user.uid)
    return {"message": f"Deleted {deleted} sessions", "deleted": deleted}

@router.delete("/sessions/by-date/{shift_date}", response_model=SessionDeleteResponse)
async def delete_shift_date_sessions(
    shift_date: date,
    service: AttendanceService = Depends(get_attendance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Clear all work sessions of one shift-day"""
    deleted = await service.delete_shift_date(shift_date, current_user.uid)
    return {"message": f"Deleted {deleted} records for {shift_date}", "deleted": deleted}
