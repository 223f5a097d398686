from pydantic import BaseModel, validator
from typing import Dict, List, Optional
from datetime import datetime, time
from app.models.shared.enums import DayOfWeek
from app.schemas.hr.staff_schema import StaffInfo

class BreakSlot(BaseModel):
    start: time
    end: time

    @validator('end')
    def validate_end(cls, v, values):
        start = values.get('start')
        if start is not None and v <= start:
            raise ValueError('Break must end after it starts')
        return v

class DayAvailability(BaseModel):
    available: bool = False
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    breaks: List[BreakSlot] = []

    @validator('end_time')
    def validate_end_time(cls, v, values):
        start = values.get('start_time')
        if values.get('available') and start is not None and v <= start:
            raise ValueError('End time must be after start time')
        return v

class AvailabilityUpdate(BaseModel):
    availabilities: Dict[DayOfWeek, DayAvailability]

class AvailabilityResponse(BaseModel):
    staff: StaffInfo
    availabilities: Dict[DayOfWeek, DayAvailability]
    available_days: int
    updated_at: Optional[datetime] = None
