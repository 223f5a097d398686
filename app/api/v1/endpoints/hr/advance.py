from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import CurrentUser, get_current_staff, get_shift_calendar, require_admin
from app.core.database import get_async_session
from app.models.hr.staff import Staff
from app.models.shared.enums import RequestStatus
from app.schemas.common.pagination import PaginatedResponse
from app.schemas.hr.advance_schema import (
    AdvanceRequestCreate,
    AdvanceRequestResponse,
    RequestRejection,
    RequestStats,
)
from app.services.hr.advance_service import AdvanceService
from app.utils.shift_calendar import ShiftCalendar

router = APIRouter()

def get_advance_service(
    session: AsyncSession = Depends(get_async_session),
    calendar: ShiftCalendar = Depends(get_shift_calendar),
) -> AdvanceService:
    return AdvanceService(session, calendar)

@router.post("/", response_model=AdvanceRequestResponse)
async def request_advance(
    data: AdvanceRequestCreate,
    service: AdvanceService = Depends(get_advance_service),
    staff: Staff = Depends(get_current_staff)
):
    """Request a salary advance for the current shift-month"""
    return await service.request_advance(staff, data)

@router.get("/me", response_model=PaginatedResponse[AdvanceRequestResponse])
async def get_my_advances(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    status: Optional[RequestStatus] = Query(None),
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: AdvanceService = Depends(get_advance_service),
    staff: Staff = Depends(get_current_staff)
):
    return await service.get_requests(
        page_index=page_index,
        page_size=page_size,
        staff_id=staff.id,
        request_status=status,
        shift_month=shift_month
    )

@router.get("/stats", response_model=RequestStats)
async def get_advance_stats(
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: AdvanceService = Depends(get_advance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.get_stats(shift_month)

@router.get("/", response_model=PaginatedResponse[AdvanceRequestResponse])
async def get_advances(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    staff_id: Optional[int] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    shift_month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: AdvanceService = Depends(get_advance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get advance requests with filtering and pagination"""
    return await service.get_requests(
        page_index=page_index,
        page_size=page_size,
        staff_id=staff_id,
        request_status=status,
        shift_month=shift_month
    )

@router.put("/{request_id}/approve", response_model=AdvanceRequestResponse)
async def approve_advance(
    request_id: int,
    service: AdvanceService = Depends(get_advance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.approve_request(request_id, current_user.uid)

@router.put("/{request_id}/reject", response_model=AdvanceRequestResponse)
async def reject_advance(
    request_id: int,
    data: RequestRejection,
    service: AdvanceService = Depends(get_advance_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.reject_request(request_id, data.rejection_reason, current_user.uid)
