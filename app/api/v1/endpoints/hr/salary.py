from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CurrentUser, get_current_staff, get_shift_calendar, require_admin
from app.core.database import get_async_session
from app.core.exceptions import NotFoundError
from app.models.hr.staff import Staff
from app.schemas.hr.salary_schema import PayrollOverviewResponse, PayrollResponse, SalaryResponse, SalarySet
from app.services.hr.salary_service import SalaryService
from app.services.hr.staff_service import StaffService
from app.utils.shift_calendar import ShiftCalendar

router = APIRouter()

SHIFT_MONTH_PATTERN = r"^\d{4}-\d{2}$"

def get_salary_service(
    session: AsyncSession = Depends(get_async_session),
    calendar: ShiftCalendar = Depends(get_shift_calendar),
) -> SalaryService:
    return SalaryService(session, calendar)

@router.get("/overview", response_model=PayrollOverviewResponse)
async def get_payroll_overview(
    shift_month: Optional[str] = Query(None, pattern=SHIFT_MONTH_PATTERN),
    service: SalaryService = Depends(get_salary_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Payroll of all staff for a shift-month"""
    return await service.get_payroll_overview(shift_month)

@router.get("/me/payroll", response_model=PayrollResponse)
async def get_my_payroll(
    shift_month: Optional[str] = Query(None, pattern=SHIFT_MONTH_PATTERN),
    service: SalaryService = Depends(get_salary_service),
    staff: Staff = Depends(get_current_staff)
):
    """Salary breakdown of the caller"""
    return await service.get_payroll(staff, shift_month)

@router.put("/{staff_id}", response_model=SalaryResponse)
async def set_salary(
    staff_id: int,
    data: SalarySet,
    service: SalaryService = Depends(get_salary_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Set or update the monthly salary of a staff member"""
    return await service.set_salary(staff_id, data.monthly_salary, current_user.uid)

@router.get("/{staff_id}", response_model=SalaryResponse)
async def get_salary(
    staff_id: int,
    service: SalaryService = Depends(get_salary_service),
    current_user: CurrentUser = Depends(require_admin)
):
    return await service.get_salary(staff_id)

@router.get("/{staff_id}/payroll", response_model=PayrollResponse)
async def get_staff_payroll(
    staff_id: int,
    shift_month: Optional[str] = Query(None, pattern=SHIFT_MONTH_PATTERN),
    session: AsyncSession = Depends(get_async_session),
    service: SalaryService = Depends(get_salary_service),
    current_user: CurrentUser = Depends(require_admin)
):
    """Salary breakdown of a staff member for a shift-month"""
    staff = await StaffService(session).get_staff(staff_id)
    if not staff:
        raise NotFoundError("Staff not found")
    return await service.get_payroll(staff, shift_month)
