import logging
from typing import Any, Dict, Optional
from datetime import timezone
from decimal import Decimal
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BusinessRuleError, NotFoundError
from app.models.hr.overtime_request import OvertimeRequest
from app.models.shared.enums import RequestStatus
from app.utils.shift_calendar import ShiftCalendar

logger = logging.getLogger(__name__)


class OvertimeService:
    def __init__(self, session: AsyncSession, calendar: ShiftCalendar):
        self.session = session
        self.calendar = calendar

    async def _get_request(self, request_id: int) -> OvertimeRequest:
        result = await self.session.execute(
            select(OvertimeRequest)
            .options(selectinload(OvertimeRequest.staff))
            .where(OvertimeRequest.id == request_id, OvertimeRequest.is_deleted == False)
        )
        request = result.scalar_one_or_none()
        if not request:
            raise NotFoundError("OT request not found")
        return request

    async def approve_request(self, request_id: int, processed_by: str) -> OvertimeRequest:
        request = await self._get_request(request_id)
        return await self._close_request(request, RequestStatus.APPROVED, processed_by)

    async def reject_request(self, request_id: int, rejection_reason: str, processed_by: str) -> OvertimeRequest:
        request = await self._get_request(request_id)
        return await self._close_request(request, RequestStatus.REJECTED, processed_by, rejection_reason)

    async def _close_request(
        self,
        request: OvertimeRequest,
        new_status: RequestStatus,
        processed_by: str,
        rejection_reason: Optional[str] = None
    ) -> OvertimeRequest:
        if request.status != RequestStatus.PENDING:
            raise BusinessRuleError(f"OT request has already been {request.status.value}")
        try:
            request.status = new_status
            request.processed_by = processed_by
            request.processed_at = self.calendar.clock.now().astimezone(timezone.utc)
            request.rejection_reason = rejection_reason
            await self.session.commit()
            await self.session.refresh(request, attribute_names=["staff"])
            logger.info(
                f"OT request {request.id} {new_status.value} for {request.staff.staff_code}: "
                f"{request.ot_hours}h / Rs. {request.ot_amount} by {processed_by}"
            )
            return request
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error processing OT request {request.id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error processing OT request")

    async def get_requests(
        self,
        page_index: int = 1,
        page_size: int = 100,
        staff_id: Optional[int] = None,
        request_status: Optional[RequestStatus] = None,
        shift_month: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get paginated OT requests, newest first"""
        conditions = [OvertimeRequest.is_deleted == False]
        if staff_id:
            conditions.append(OvertimeRequest.staff_id == staff_id)
        if request_status:
            conditions.append(OvertimeRequest.status == request_status)
        if shift_month:
            conditions.append(OvertimeRequest.shift_month == shift_month)

        total_count = await self.session.scalar(
            select(func.count(OvertimeRequest.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            select(OvertimeRequest)
            .options(selectinload(OvertimeRequest.staff))
            .where(*conditions)
            .order_by(OvertimeRequest.requested_at.desc())
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
        """Counts per status and approved OT totals for the approvals dashboard"""
        conditions = [OvertimeRequest.is_deleted == False]
        if shift_month:
            conditions.append(OvertimeRequest.shift_month == shift_month)

        result = await self.session.execute(
            select(
                OvertimeRequest.status,
                func.count(OvertimeRequest.id),
                func.sum(OvertimeRequest.ot_hours),
                func.sum(OvertimeRequest.ot_amount),
            )
            .where(*conditions)
            .group_by(OvertimeRequest.status)
        )

        counts = {s: 0 for s in RequestStatus}
        total_hours = Decimal("0")
        total_amount = Decimal("0")
        for row_status, count, hours, amount in result.all():
            counts[RequestStatus(row_status)] = count
            if row_status == RequestStatus.APPROVED:
                total_hours = Decimal(str(hours or 0))
                total_amount = Decimal(str(amount or 0))

        total = sum(counts.values())
        approved = counts[RequestStatus.APPROVED]
        return {
            "total": total,
            "pending": counts[RequestStatus.PENDING],
            "approved": approved,
            "rejected": counts[RequestStatus.REJECTED],
            "total_ot_hours": total_hours,
            "total_ot_amount": total_amount,
            "approval_rate": round(approved / total * 100) if total else 0,
            "average_ot_hours": (total_hours / approved).quantize(Decimal("0.01")) if approved else Decimal("0"),
            "average_ot_amount": (total_amount / approved).quantize(Decimal("1")) if approved else Decimal("0"),
        }
