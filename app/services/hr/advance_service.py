import logging
from typing import Any, Dict, Optional
from datetime import timezone
from decimal import Decimal
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BusinessRuleError, NotFoundError
from app.models.hr.advance_request import AdvanceRequest
from app.models.hr.staff import Staff
from app.models.shared.enums import RequestStatus
from app.schemas.hr.advance_schema import AdvanceRequestCreate
from app.services.hr.payroll_aggregator import (
    AdvanceRejection,
    advance_rejection_message,
    check_advance_admission,
)
from app.services.hr.salary_service import SalaryService
from app.utils.shift_calendar import ShiftCalendar

logger = logging.getLogger(__name__)


class AdvanceService:
    def __init__(self, session: AsyncSession, calendar: ShiftCalendar):
        self.session = session
        self.calendar = calendar
        self.salary_service = SalaryService(session, calendar)

    async def _has_pending_request(self, staff_id: int) -> bool:
        pending = await self.session.scalar(
            select(func.count(AdvanceRequest.id)).where(
                AdvanceRequest.staff_id == staff_id,
                AdvanceRequest.status == RequestStatus.PENDING,
                AdvanceRequest.is_deleted == False
            )
        )
        return bool(pending)

    async def _get_request(self, request_id: int) -> AdvanceRequest:
        result = await self.session.execute(
            select(AdvanceRequest)
            .options(selectinload(AdvanceRequest.staff))
            .where(AdvanceRequest.id == request_id, AdvanceRequest.is_deleted == False)
        )
        request = result.scalar_one_or_none()
        if not request:
            raise NotFoundError("Advance request not found")
        return request

    # ---------- Staff side ----------
    async def request_advance(self, staff: Staff, data: AdvanceRequestCreate) -> AdvanceRequest:
        """Submit an advance against the current shift-month, if the admission rules allow it"""
        record = await self.salary_service.get_salary_record(staff.id)
        if record is None:
            raise BusinessRuleError("Your salary is not set. Please contact administration.")

        now = self.calendar.clock.now()
        shift_month = self.calendar.shift_month(now)
        breakdown = await self.salary_service.calculate_breakdown(staff.id, record.monthly_salary, shift_month)
        has_pending = await self._has_pending_request(staff.id)

        rejection = check_advance_admission(data.amount, breakdown, has_pending)
        if rejection is not None:
            logger.info(f"Advance of Rs. {data.amount} refused for {staff.staff_code}: {rejection.value}")
            raise BusinessRuleError({
                "reason": rejection.value,
                "message": advance_rejection_message(rejection, breakdown),
            })

        try:
            request = AdvanceRequest(
                staff_id=staff.id,
                amount=data.amount,
                reason=data.reason,
                status=RequestStatus.PENDING,
                shift_month=shift_month,
                requested_at=now.astimezone(timezone.utc),
                requested_salary_basis=record.monthly_salary,
                hourly_rate=record.hourly_rate,
                max_allowed=breakdown.max_advance_allowed,
                remaining_salary_before=breakdown.remaining_base_salary,
            )
            self.session.add(request)
            await self.session.commit()
            await self.session.refresh(request, attribute_names=["staff"])

            logger.info(f"Advance request {request.id} submitted by {staff.staff_code}: Rs. {data.amount} for {shift_month}")
            return request
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error submitting advance request for {staff.staff_code}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error submitting request")

    # ---------- Admin side ----------
    async def approve_request(self, request_id: int, processed_by: str) -> AdvanceRequest:
        request = await self._get_request(request_id)
        self._ensure_pending(request)

        # Other advances may have been approved since this one was requested
        record = await self.salary_service.get_salary(request.staff_id)
        breakdown = await self.salary_service.calculate_breakdown(
            request.staff_id, record.monthly_salary, request.shift_month
        )
        rejection = check_advance_admission(request.amount, breakdown, has_pending=False)
        if rejection in (AdvanceRejection.ADVANCE_LIMIT_EXHAUSTED, AdvanceRejection.AMOUNT_EXCEEDS_MAX):
            raise BusinessRuleError({
                "reason": rejection.value,
                "message": advance_rejection_message(rejection, breakdown),
            })

        return await self._close_request(request, RequestStatus.APPROVED, processed_by)

    async def reject_request(self, request_id: int, rejection_reason: str, processed_by: str) -> AdvanceRequest:
        request = await self._get_request(request_id)
        self._ensure_pending(request)
        request.rejection_reason = rejection_reason
        return await self._close_request(request, RequestStatus.REJECTED, processed_by)

    @staticmethod
    def _ensure_pending(request: AdvanceRequest):
        if request.status != RequestStatus.PENDING:
            raise BusinessRuleError(f"Advance request has already been {request.status.value}")

    async def _close_request(self, request: AdvanceRequest, new_status: RequestStatus, processed_by: str) -> AdvanceRequest:
        try:
            request.status = new_status
            request.processed_by = processed_by
            request.processed_at = self.calendar.clock.now().astimezone(timezone.utc)
            await self.session.commit()
            await self.session.refresh(request, attribute_names=["staff"])
            logger.info(
                f"Advance request {request.id} {new_status.value} for {request.staff.staff_code} "
                f"(Rs. {request.amount}) by {processed_by}"
            )
            return request
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error processing advance request {request.id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error processing request")

    # ---------- Retrieval ----------
    async def get_requests(
        self,
        page_index: int = 1,
        page_size: int = 100,
        staff_id: Optional[int] = None,
        request_status: Optional[RequestStatus] = None,
        shift_month: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get paginated advance requests, newest first"""
        conditions = [AdvanceRequest.is_deleted == False]
        if staff_id:
            conditions.append(AdvanceRequest.staff_id == staff_id)
        if request_status:
            conditions.append(AdvanceRequest.status == request_status)
        if shift_month:
            conditions.append(AdvanceRequest.shift_month == shift_month)

        total_count = await self.session.scalar(
            select(func.count(AdvanceRequest.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            select(AdvanceRequest)
            .options(selectinload(AdvanceRequest.staff))
            .where(*conditions)
            .order_by(AdvanceRequest.requested_at.desc())
            .offset(skip)
            .limit(page_size)
        )
        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": result.scalars().all()
        }

    async def get_stats(self, shift_month: Optional[str] = None) -> Dict[str, Any]:
        conditions = [AdvanceRequest.is_deleted == False]
        if shift_month:
            conditions.append(AdvanceRequest.shift_month == shift_month)

        result = await self.session.execute(
            select(AdvanceRequest.status, func.count(AdvanceRequest.id), func.sum(AdvanceRequest.amount))
            .where(*conditions)
            .group_by(AdvanceRequest.status)
        )
        counts = {s: 0 for s in RequestStatus}
        approved_amount = Decimal("0")
        for row_status, count, amount in result.all():
            counts[RequestStatus(row_status)] = count
            if row_status == RequestStatus.APPROVED:
                approved_amount = Decimal(str(amount or 0))

        return {
            "total": sum(counts.values()),
            "pending": counts[RequestStatus.PENDING],
            "approved": counts[RequestStatus.APPROVED],
            "rejected": counts[RequestStatus.REJECTED],
            "approved_amount": approved_amount,
        }
