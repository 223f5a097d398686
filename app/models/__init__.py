from app.models.hr.staff import Staff
from app.models.hr.work_session import WorkSession
from app.models.hr.salary_record import SalaryRecord
from app.models.hr.advance_request import AdvanceRequest
from app.models.hr.overtime_request import OvertimeRequest
from app.models.hr.availability import StaffAvailability


__all__ = [
    "Staff",
    "WorkSession",
    "SalaryRecord",
    "AdvanceRequest",
    "OvertimeRequest",
    "StaffAvailability",
]
