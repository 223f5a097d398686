from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import CurrentUser, get_current_staff, get_shift_calendar, require_admin
from app.core.database import get_async_session
from app.models.hr.staff import Staff
from app.models.shared.enums import RequestStatus
from app.schemas.common.pagination import PaginatedResponse
from app.schemas.hr.advance_schema import RequestRejection
from app.schemas.hr.overtime_schema import OvertimeRequestResponse, OvertimeStats
from app.services.hr.overtime_service import OvertimeService
from app.utils.shift_calendar import ShiftCalendar

router = APIRouter()

def get_overtime_service(
    session: AsyncSession = Depends(get_async_session),
    calendar: ShiftCalendar = Depends(get_shift_calendar),
) -> OvertimeService:
    return OvertimeService(session, calendar)

@router.get("/me", response_model=PaginatedResponse[OvertimeRequestResponse])
async def get_my_overtime(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    status: Optional[RequestStatus] = Query(None),
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: OvertimeService = Depends(get_overtime_service),
    staff: Staff = Depends(get_current_staff)
):
    """OT requests raised for the caller's sessions"""
    return await service.get_requests(
        page_index=page_index,
        page_size=page_size,
        staff_id=staff.id,
        request_status=status,
        shift_month=shift_month
    )

@router.get("/stats", response_model=OvertimeStats)
async def get_overtime_stats(
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: OvertimeService = Depends(get_overtime_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.get_stats(shift_month)

@router.get("/", response_model=PaginatedResponse[OvertimeRequestResponse])
async def get_overtime_requests(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    staff_id: Optional[int] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: OvertimeService = Depends(get_overtime_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.get_requests(
        page_index=page_index,
        page_size=page_size,
        staff_id=staff_id,
        request_status=status,
        shift_month=shift_month
    )

@router.put("/{request_id}/approve", response_model=OvertimeRequestResponse)
async def approve_overtime(
    request_id: int,
    service: OvertimeService = Depends(get_overtime_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Approve an OT request so its amount counts towards payroll"""
    return await service.approve_request(request_id, current_user.uid)

@router.put("/{request_id}/reject", response_model=OvertimeRequestResponse)
async def reject_overtime(
    request_id: int,
    data: RequestRejection,
    service: OvertimeService = Depends(get_overtime_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.reject_request(request_id, data.rejection_reason, current_user.uid)
