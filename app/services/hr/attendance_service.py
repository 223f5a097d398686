import logging
from typing import Any, Dict, List, Optional
from datetime import date, timezone
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.clock import ensure_utc
from app.core.exceptions import (
    BusinessRuleError,
    ComputationFault,
    InvalidDurationError,
    LocationRestrictedError,
)
from app.models.hr.staff import Staff
from app.models.hr.work_session import WorkSession
from app.models.hr.overtime_request import OvertimeRequest
from app.models.shared.enums import RequestStatus, SessionStatus
from app.schemas.hr.attendance_schema import LocationPayload
from app.services.hr.overtime_policy import OvertimePolicy
from app.utils.geo import DistanceGate, LocationCheck
from app.utils.shift_calendar import ShiftCalendar

logger = logging.getLogger(__name__)

# Open sessions older than this are flagged on the admin summary
LONG_SESSION_ALERT_HOURS = 10


class AttendanceService:
    def __init__(self, session: AsyncSession, calendar: ShiftCalendar, gate: DistanceGate):
        self.session = session
        self.calendar = calendar
        self.clock = calendar.clock
        self.gate = gate
        self.policy = OvertimePolicy(calendar)

    # ---------- Location ----------
    def check_location(self, latitude: float, longitude: float) -> LocationCheck:
        return self.gate.check(latitude, longitude)

    def _verify_location(self, staff: Staff, location: LocationPayload, action: str) -> LocationCheck:
        check = self.gate.check(location.latitude, location.longitude)
        if not check.allowed:
            logger.warning(
                f"{action} refused for {staff.staff_code}: {check.distance:.1f}m from reference "
                f"(limit {check.max_meters}m)"
            )
            raise LocationRestrictedError(f"Cannot {action}: {check.message}")
        return check

    async def _get_open_session(self, staff_id: int) -> Optional[WorkSession]:
        result = await self.session.execute(
            select(WorkSession)
            .options(selectinload(WorkSession.staff))
            .where(
                WorkSession.staff_id == staff_id,
                WorkSession.status == SessionStatus.ACTIVE,
                WorkSession.is_deleted == False
            )
            .order_by(WorkSession.clock_in.desc())
        )
        return result.scalars().first()

    # ---------- Clock in / out ----------
    async def clock_in(self, staff: Staff, location: LocationPayload) -> WorkSession:
        """Open a work session after verifying the staff member is at the cafe"""
        try:
            check = self._verify_location(staff, location, "clock in")

            # At most one open session per staff member
            if await self._get_open_session(staff.id):
                raise BusinessRuleError("You are already clocked in. Clock out before starting a new session.")

            now = self.clock.now()
            work_session = WorkSession(
                staff_id=staff.id,
                clock_in=now.astimezone(timezone.utc),
                status=SessionStatus.ACTIVE,
                shift_date=self.calendar.shift_date(now),
                shift_month=self.calendar.shift_month(now),
                is_night_shift=self.calendar.is_night_shift(now),
                cross_midnight=False,
                total_hours=0,
                regular_hours=0,
                ot_hours=0,
                ot_amount=0,
                clock_in_latitude=location.latitude,
                clock_in_longitude=location.longitude,
                clock_in_distance=round(check.distance, 2),
            )
            self.session.add(work_session)
            await self.session.commit()
            await self.session.refresh(work_session, attribute_names=["staff"])

            logger.info(
                f"Clocked in: {staff.staff_code} at {now.isoformat()} | "
                f"Shift Date: {work_session.shift_date} | Night: {work_session.is_night_shift}"
            )
            return work_session

        except HTTPException:
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error clocking in {staff.staff_code}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error clocking in")

    async def clock_out(self, staff: Staff, location: LocationPayload) -> Dict[str, Any]:
        """Close the open session, price its overtime and raise an OT request when due"""
        try:
            check = self._verify_location(staff, location, "clock out")

            work_session = await self._get_open_session(staff.id)
            if not work_session:
                raise BusinessRuleError("You are not clocked in.")

            now = self.clock.now()
            clock_in_time = ensure_utc(work_session.clock_in)
            # Raises InvalidDurationError / ComputationFault before anything is written
            breakdown = self.policy.compute_overtime(clock_in_time, now).unwrap()

            work_session.clock_out = now.astimezone(timezone.utc)
            work_session.status = SessionStatus.COMPLETED
            work_session.total_hours = round(breakdown.hours_worked, 4)
            work_session.regular_hours = round(breakdown.regular_hours, 4)
            work_session.ot_hours = round(breakdown.ot_hours, 4)
            work_session.ot_amount = round(breakdown.ot_amount, 2)
            work_session.is_night_shift = breakdown.is_night_shift
            work_session.cross_midnight = breakdown.cross_midnight
            work_session.clock_out_latitude = location.latitude
            work_session.clock_out_longitude = location.longitude
            work_session.clock_out_distance = round(check.distance, 2)

            ot_request = None
            if breakdown.has_ot:
                ot_request = OvertimeRequest(
                    staff_id=staff.id,
                    session=work_session,
                    status=RequestStatus.PENDING,
                    requested_at=now.astimezone(timezone.utc),
                    shift_date=work_session.shift_date,
                    shift_month=work_session.shift_month,
                    regular_hours=round(breakdown.regular_hours, 4),
                    ot_hours=round(breakdown.ot_hours, 4),
                    ot_amount=round(breakdown.ot_amount, 2),
                    is_night_shift=breakdown.is_night_shift,
                    cross_midnight=breakdown.cross_midnight,
                )
                self.session.add(ot_request)

            await self.session.commit()
            await self.session.refresh(work_session, attribute_names=["staff"])

            logger.info(
                f"Clocked out: {staff.staff_code} | Worked: {breakdown.hours_worked:.2f}h | "
                f"OT: {breakdown.ot_hours:.2f}h (Rs. {breakdown.ot_amount:.2f}) | "
                f"Cross midnight: {breakdown.cross_midnight}"
            )
            if ot_request is not None:
                logger.info(f"OT request {ot_request.id} created for {staff.staff_code}, session {work_session.id}")

            return {
                "session": work_session,
                "hours_worked": breakdown.hours_worked,
                "has_ot": breakdown.has_ot,
                "overtime_request_id": ot_request.id if ot_request is not None else None,
            }

        except (HTTPException, InvalidDurationError, ComputationFault):
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error clocking out {staff.staff_code}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error clocking out")

    # ---------- Retrieval ----------
    async def get_current_shift_sessions(self, staff: Staff) -> Dict[str, Any]:
        """Sessions of the shift-day in progress (18:00 yesterday to 18:00 today)"""
        now = self.clock.now()
        shift_date = self.calendar.shift_date(now)
        period_start, period_end = self.calendar.period_for(shift_date)

        result = await self.session.execute(
            select(WorkSession)
            .options(selectinload(WorkSession.staff))
            .where(
                WorkSession.staff_id == staff.id,
                WorkSession.shift_date == shift_date,
                WorkSession.is_deleted == False
            )
            .order_by(WorkSession.clock_in.desc())
        )
        sessions = result.scalars().all()

        total_hours = sum(float(s.total_hours or 0) for s in sessions if s.clock_out is not None)
        active = next((s for s in sessions if s.status == SessionStatus.ACTIVE), None)
        if active is None:
            # An open session may have started on an earlier shift-day
            active = await self._get_open_session(staff.id)

        return {
            "shift_date": shift_date,
            "period_start": period_start,
            "period_end": period_end,
            "is_clocked_in": active is not None,
            "active_session": active,
            "total_hours": total_hours,
            "sessions": sessions,
        }

    async def get_sessions(
        self,
        page_index: int = 1,
        page_size: int = 100,
        staff_id: Optional[int] = None,
        shift_date: Optional[date] = None,
        shift_month: Optional[str] = None,
        session_status: Optional[SessionStatus] = None
    ) -> Dict[str, Any]:
        """Get paginated work sessions with filtering"""
        conditions = [WorkSession.is_deleted == False]
        if staff_id:
            conditions.append(WorkSession.staff_id == staff_id)
        if shift_date:
            conditions.append(WorkSession.shift_date == shift_date)
        if shift_month:
            conditions.append(WorkSession.shift_month == shift_month)
        if session_status:
            conditions.append(WorkSession.status == session_status)

        total_count = await self.session.scalar(
            select(func.count(WorkSession.id)).where(*conditions)
        )

        skip = (page_index - 1) * page_size
        result = await self.session.execute(
            select(WorkSession)
            .options(selectinload(WorkSession.staff))
            .where(*conditions)
            .order_by(WorkSession.clock_in.desc())
            .offset(skip)
            .limit(page_size)
        )
        return {
            "page_index": page_index,
            "page_size": page_size,
            "count": total_count or 0,
            "data": result.scalars().all()
        }

    async def get_shift_day_summary(self, shift_date: Optional[date] = None) -> Dict[str, Any]:
        """Per-staff totals for one shift-day plus everyone currently clocked in"""
        shift_date = shift_date or self.calendar.current_shift_date()

        result = await self.session.execute(
            select(WorkSession)
            .options(selectinload(WorkSession.staff))
            .where(WorkSession.shift_date == shift_date, WorkSession.is_deleted == False)
            .order_by(WorkSession.clock_in.desc())
        )
        sessions = result.scalars().all()

        summary: Dict[int, Dict[str, Any]] = {}
        for s in sessions:
            entry = summary.setdefault(s.staff_id, {
                "staff_id": s.staff_id,
                "staff_code": s.staff.staff_code,
                "full_name": s.staff.full_name,
                "sessions": 0,
                "total_hours": 0.0,
                "ot_hours": 0.0,
                "night_shifts": 0,
                "last_activity": s.clock_in,
            })
            if s.clock_out is not None:
                entry["total_hours"] += float(s.total_hours or 0)
                entry["ot_hours"] += float(s.ot_hours or 0)
            entry["sessions"] += 1
            if s.is_night_shift:
                entry["night_shifts"] += 1
            entry["last_activity"] = max(entry["last_activity"], s.clock_in)

        active_res = await self.session.execute(
            select(WorkSession)
            .options(selectinload(WorkSession.staff))
            .where(WorkSession.status == SessionStatus.ACTIVE, WorkSession.is_deleted == False)
            .order_by(WorkSession.clock_in)
        )
        active_sessions: List[WorkSession] = active_res.scalars().all()

        now = self.clock.now()
        long_running = []
        for s in active_sessions:
            hours_open = (now - ensure_utc(s.clock_in)).total_seconds() / 3600
            if hours_open > LONG_SESSION_ALERT_HOURS:
                long_running.append({
                    "session_id": s.id,
                    "staff_code": s.staff.staff_code,
                    "full_name": s.staff.full_name,
                    "clock_in": s.clock_in,
                    "hours_open": round(hours_open, 1),
                })

        return {
            "shift_date": shift_date,
            "total_sessions": len(sessions),
            "ot_sessions": len([s for s in sessions if (s.ot_hours or 0) > 0]),
            "total_overtime_hours": sum(float(s.ot_hours or 0) for s in sessions),
            "staff": sorted(summary.values(), key=lambda e: e["full_name"]),
            "active_staff": active_sessions,
            "long_running": long_running,
        }

    # ---------- Deletion ----------
    async def delete_sessions(self, session_ids: List[int], deleted_by: str) -> int:
        """Soft-delete the given sessions; returns how many were deleted"""
        if not session_ids:
            return 0
        result = await self.session.execute(
            select(WorkSession).where(WorkSession.id.in_(session_ids), WorkSession.is_deleted == False)
        )
        return await self._soft_delete(result.scalars().all(), deleted_by, f"ids {sorted(set(session_ids))}")

    async def delete_shift_date(self, shift_date: date, deleted_by: str) -> int:
        """Soft-delete every session booked against one shift-day"""
        result = await self.session.execute(
            select(WorkSession).where(WorkSession.shift_date == shift_date, WorkSession.is_deleted == False)
        )
        return await self._soft_delete(result.scalars().all(), deleted_by, f"shift date {shift_date}")

    async def _soft_delete(self, sessions: List[WorkSession], deleted_by: str, scope: str) -> int:
        try:
            for work_session in sessions:
                work_session.is_deleted = True
            await self.session.commit()
            logger.info(f"Deleted {len(sessions)} work sessions ({scope}) by user {deleted_by}")
            return len(sessions)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error deleting work sessions ({scope}): {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting sessions")
