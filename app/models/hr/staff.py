from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Staff(BaseModel):
    __tablename__ = 'staff'

    staff_code = Column(String(20), unique=True, nullable=False, index=True)
    user_uid = Column(String(128), unique=True, nullable=False, index=True)  # Subject claim from the identity provider
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    is_active = Column(Boolean, default=True)

    # Relationships
    sessions = relationship("WorkSession", back_populates="staff")
    salary = relationship("SalaryRecord", back_populates="staff", uselist=False)
    advance_requests = relationship("AdvanceRequest", back_populates="staff")
    overtime_requests = relationship("OvertimeRequest", back_populates="staff")
    availability = relationship("StaffAvailability", back_populates="staff", uselist=False)
