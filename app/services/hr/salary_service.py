import logging
from typing import Any, Dict, List, Optional
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from fastapi import HTTPException

from app.core.exceptions import NotFoundError
from app.models.hr.advance_request import AdvanceRequest
from app.models.hr.overtime_request import OvertimeRequest
from app.models.hr.salary_record import SalaryRecord
from app.models.hr.staff import Staff
from app.models.shared.enums import RequestStatus
from app.services.hr.payroll_aggregator import (
    PayrollBreakdown,
    aggregate_payroll,
    approved_amounts,
    hourly_rate,
    money,
    to_decimal,
)
from app.utils.shift_calendar import ShiftCalendar

logger = logging.getLogger(__name__)

class SalaryService:
    def __init__(self, session: AsyncSession, calendar: ShiftCalendar):
        self.session = session
        self.calendar = calendar

    # ---------- Salary records ----------
    async def set_salary(self, staff_id: int, monthly_salary: Decimal, set_by: str) -> SalaryRecord:
        """Create or replace the monthly salary of a staff member"""
        staff = await self.session.get(Staff, staff_id)
        if not staff or not staff.is_active:
            raise NotFoundError("Staff not found")

        try:
            record = await self.get_salary_record(staff_id)
            is_update = record is not None
            if record is None:
                record = SalaryRecord(staff_id=staff_id)
                self.session.add(record)

            record.monthly_salary = monthly_salary
            record.hourly_rate = hourly_rate(monthly_salary)
            record.set_by = set_by

            await self.session.commit()
            await self.session.refresh(record)

            logger.info(
                f"{'Updated' if is_update else 'Set'} salary for {staff.staff_code}: "
                f"Rs. {monthly_salary}/month (hourly {record.hourly_rate}) by {set_by}"
            )
            return record
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error setting salary for staff {staff_id}: {e}")
            raise HTTPException(status_code=500, detail="Error setting salary")

    async def get_salary_record(self, staff_id: int) -> Optional[SalaryRecord]:
        result = await self.session.execute(
            select(SalaryRecord).where(SalaryRecord.staff_id == staff_id, SalaryRecord.is_deleted == False)
        )
        return result.scalar_one_or_none()

    async def get_salary(self, staff_id: int) -> SalaryRecord:
        record = await self.get_salary_record(staff_id)
        if not record:
            raise NotFoundError("Salary is not set for this staff member")
        return record

    # ---------- Payroll ----------
    async def calculate_breakdown(self, staff_id: int, monthly_salary: Any, shift_month: str) -> PayrollBreakdown:
        """Recompute a month's payroll from the approved advances and OT on record"""
        advances = await self.session.scalars(
            select(AdvanceRequest).where(
                AdvanceRequest.staff_id == staff_id,
                AdvanceRequest.shift_month == shift_month,
                AdvanceRequest.status == RequestStatus.APPROVED,
                AdvanceRequest.is_deleted == False
            )
        )
        overtime = await self.session.scalars(
            select(OvertimeRequest).where(
                OvertimeRequest.staff_id == staff_id,
                OvertimeRequest.shift_month == shift_month,
                OvertimeRequest.status == RequestStatus.APPROVED,
                OvertimeRequest.is_deleted == False
            )
        )
        return aggregate_payroll(
            monthly_salary,
            approved_amounts(advances.all(), shift_month, "amount"),
            approved_amounts(overtime.all(), shift_month, "ot_amount"),
        )

    def _payroll_response(self, staff: Staff, record: SalaryRecord, shift_month: str, breakdown: PayrollBreakdown) -> Dict[str, Any]:
        salary = breakdown.monthly_salary
        usage = int(round(breakdown.total_advances / salary * 100)) if salary > 0 else 0
        return {
            "staff": staff,
            "shift_month": shift_month,
            "hourly_rate": to_decimal(record.hourly_rate),
            "advance_usage_percent": usage,
            **{k: money(v) for k, v in breakdown.as_dict().items()},
        }

    async def get_payroll(self, staff: Staff, shift_month: Optional[str] = None) -> Dict[str, Any]:
        """Salary breakdown of one staff member for a shift-month (current one by default)"""
        shift_month = shift_month or self.calendar.current_shift_month()
        record = await self.get_salary(staff.id)
        breakdown = await self.calculate_breakdown(staff.id, record.monthly_salary, shift_month)
        return self._payroll_response(staff, record, shift_month, breakdown)

    async def get_payroll_overview(self, shift_month: Optional[str] = None) -> Dict[str, Any]:
        """Payroll of every active staff member with a salary, plus totals"""
        shift_month = shift_month or self.calendar.current_shift_month()

        staff_res = await self.session.execute(
            select(Staff)
            .options(selectinload(Staff.salary))
            .where(Staff.is_active == True)
            .order_by(Staff.staff_code)
        )
        staffs = staff_res.scalars().all()

        payrolls: List[Dict[str, Any]] = []
        for staff in staffs:
            if staff.salary is None:
                continue
            breakdown = await self.calculate_breakdown(staff.id, staff.salary.monthly_salary, shift_month)
            payrolls.append(self._payroll_response(staff, staff.salary, shift_month, breakdown))

        zero = Decimal("0")
        return {
            "shift_month": shift_month,
            "staff_count": len(staffs),
            "staff_with_salary": len(payrolls),
            "total_monthly_salary": sum((p["monthly_salary"] for p in payrolls), zero),
            "total_advances": sum((p["total_advances"] for p in payrolls), zero),
            "total_ot": sum((p["total_ot"] for p in payrolls), zero),
            "total_net_salary": sum((p["net_salary"] for p in payrolls), zero),
            "payrolls": payrolls,
        }
