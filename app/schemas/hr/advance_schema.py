from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.shared.enums import RequestStatus
from app.schemas.hr.staff_schema import StaffInfo

class AdvanceRequestCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    reason: Optional[str] = None

    @validator('reason', always=True)
    def validate_reason(cls, v):
        v = (v or "").strip()
        return v or "No reason provided"

class RequestRejection(BaseModel):
    rejection_reason: str

    @validator('rejection_reason')
    def validate_rejection_reason(cls, v):
        if not v or not v.strip():
            raise ValueError('Rejection reason is required')
        return v.strip()

class AdvanceRequestResponse(BaseModel):
    id: int
    staff: StaffInfo
    amount: Decimal
    reason: Optional[str] = None
    status: RequestStatus
    shift_month: str
    requested_at: datetime
    requested_salary_basis: Decimal
    hourly_rate: Optional[Decimal] = None
    max_allowed: Optional[Decimal] = None
    remaining_salary_before: Optional[Decimal] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True

class RequestStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    approved_amount: Decimal
