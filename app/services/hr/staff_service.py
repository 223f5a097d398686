import logging
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.core.exceptions import ConflictError, NotFoundError
from app.models.hr.staff import Staff
from app.schemas.hr.staff_schema import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ---------- Helpers ----------
    async def _generate_staff_code(self) -> str:
        prefix = "CP"
        codes = await self.session.scalars(
            select(Staff.staff_code).where(Staff.staff_code.like(f"{prefix}%"))
        )
        # hand-entered codes may leave gaps, so continue after the highest number
        numbers = [int(code[len(prefix):]) for code in codes.all() if code[len(prefix):].isdigit()]
        return f"{prefix}{max(numbers, default=0) + 1:04d}"

    # ---------- Create / Update ----------
    async def create_staff(self, data: StaffCreate, created_by: str) -> Staff:
        try:
            uid_res = await self.session.execute(
                select(Staff.id).where(Staff.user_uid == data.user_uid).limit(1)
            )
            if uid_res.scalar_one_or_none() is not None:
                raise ConflictError(f"Staff profile for user '{data.user_uid}' already exists")

            staff_code = data.staff_code or await self._generate_staff_code()
            code_res = await self.session.execute(
                select(Staff.id).where(Staff.staff_code == staff_code).limit(1)
            )
            if code_res.scalar_one_or_none() is not None:
                raise ConflictError(f"Staff code '{staff_code}' already exists")

            staff = Staff(staff_code=staff_code, **data.model_dump(exclude={"staff_code"}))
            self.session.add(staff)
            await self.session.commit()
            await self.session.refresh(staff)

            logger.info(f"Staff created: {staff.staff_code} - {staff.full_name} by user {created_by}")
            return staff

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error creating staff: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating staff")

    async def update_staff(self, staff_id: int, data: StaffUpdate, updated_by: str) -> Staff:
        staff = await self.get_staff(staff_id)
        if not staff:
            raise NotFoundError("Staff not found")
        try:
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(staff, field, value)
            await self.session.commit()
            await self.session.refresh(staff)
            logger.info(f"Staff updated: {staff.staff_code} by user {updated_by}")
            return staff
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error updating staff {staff_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating staff")

    # ---------- Read ----------
    async def get_staff(self, staff_id: int) -> Optional[Staff]:
        return await self.session.get(Staff, staff_id)

    async def get_staff_by_uid(self, user_uid: str) -> Optional[Staff]:
        result = await self.session.execute(select(Staff).where(Staff.user_uid == user_uid))
        return result.scalar_one_or_none()

    async def get_staffs(
        self,
        page_index: int = 1,
        page_size: int = 100,
        is_active: Optional[bool] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """Get paginated list of staff"""
        conditions = []
        if is_active is not None:
            conditions.append(Staff.is_active == is_active)
        if search:
            like = f"%{search}%"
            conditions.append(or_(Staff.full_name.ilike(like), Staff.staff_code.ilike(like)))

        total_count = await self.session.scalar(
            select(func.count(Staff.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        staffs = await self.session.scalars(
            select(Staff)
            .where(*conditions)
            .order_by(Staff.staff_code)
            .offset(skip)
            .limit(page_size)
        )
        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": staffs.all()
        }
