import logging
from typing import Any, Dict, List
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.hr.availability import StaffAvailability
from app.models.hr.staff import Staff
from app.models.shared.enums import DayOfWeek
from app.schemas.hr.availability_schema import AvailabilityUpdate, DayAvailability

logger = logging.getLogger(__name__)


def empty_week() -> Dict[DayOfWeek, DayAvailability]:
    return {day: DayAvailability() for day in DayOfWeek}


class AvailabilityService:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_response(self, staff: Staff, record: StaffAvailability | None) -> Dict[str, Any]:
        week = empty_week()
        if record is not None:
            for day, value in (record.availabilities or {}).items():
                week[DayOfWeek(day)] = DayAvailability(**value)
        return {
            "staff": staff,
            "availabilities": week,
            "available_days": len([d for d in week.values() if d.available]),
            "updated_at": (record.updated_at or record.created_at) if record is not None else None,
        }

    async def save_availability(self, staff: Staff, data: AvailabilityUpdate) -> Dict[str, Any]:
        """Replace the given days of a staff member's weekly availability"""
        try:
            result = await self.session.execute(
                select(StaffAvailability).where(StaffAvailability.staff_id == staff.id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = StaffAvailability(staff_id=staff.id, availabilities={})
                self.session.add(record)

            merged = dict(record.availabilities or {})
            for day, value in data.availabilities.items():
                merged[day.value] = value.model_dump(mode="json")
            # reassign so the JSON column is flagged dirty
            record.availabilities = merged

            await self.session.commit()
            await self.session.refresh(record)

            logger.info(f"Availability saved for {staff.staff_code}: {sorted(d.value for d in data.availabilities)}")
            return self._to_response(staff, record)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error saving availability for {staff.staff_code}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error saving availability")

    async def get_availability(self, staff: Staff) -> Dict[str, Any]:
        result = await self.session.execute(
            select(StaffAvailability).where(StaffAvailability.staff_id == staff.id)
        )
        return self._to_response(staff, result.scalar_one_or_none())

    async def get_all_availabilities(self) -> List[Dict[str, Any]]:
        """Weekly availability of every active staff member"""
        result = await self.session.execute(
            select(Staff)
            .options(selectinload(Staff.availability))
            .where(Staff.is_active == True)
            .order_by(Staff.full_name)
        )
        return [self._to_response(staff, staff.availability) for staff in result.scalars().all()]
