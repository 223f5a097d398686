from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from app.schemas.hr.staff_schema import StaffInfo

class SalarySet(BaseModel):
    monthly_salary: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)

class SalaryResponse(BaseModel):
    id: int
    staff_id: int
    monthly_salary: Decimal
    hourly_rate: Decimal
    set_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PayrollResponse(BaseModel):
    staff: StaffInfo
    shift_month: str
    monthly_salary: Decimal
    hourly_rate: Decimal
    total_advances: Decimal
    total_ot: Decimal
    remaining_base_salary: Decimal
    net_salary: Decimal
    max_advance_allowed: Decimal
    advance_usage_percent: int

class PayrollOverviewResponse(BaseModel):
    shift_month: str
    staff_count: int
    staff_with_salary: int
    total_monthly_salary: Decimal
    total_advances: Decimal
    total_ot: Decimal
    total_net_salary: Decimal
    payrolls: List[PayrollResponse]
