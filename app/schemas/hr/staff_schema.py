from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

class StaffBase(BaseModel):
    full_name: str
    phone: Optional[str] = None

class StaffCreate(StaffBase):
    user_uid: str
    staff_code: Optional[str] = None

    @validator('full_name')
    def validate_full_name(cls, v):
        if not v or len(v.strip()) < 2:
            raise ValueError('Staff name must be at least 2 characters')
        return v.strip()

    @validator('user_uid')
    def validate_user_uid(cls, v):
        if not v or not v.strip():
            raise ValueError('User UID is required')
        return v.strip()

    @validator('staff_code')
    def validate_staff_code(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if not v:
            return None
        return v

class StaffUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

class StaffInfo(BaseModel):
    id: int
    staff_code: str
    full_name: str

    class Config:
        from_attributes = True

class StaffResponse(StaffBase):
    id: int
    staff_code: str
    user_uid: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
