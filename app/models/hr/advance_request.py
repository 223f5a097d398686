from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.enums import RequestStatus

class AdvanceRequest(BaseModel):
    __tablename__ = 'advance_requests'

    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    reason = Column(Text)
    status = Column(SQLEnum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    shift_month = Column(String(7), nullable=False, index=True)  # Month the advance counts against
    requested_at = Column(DateTime(timezone=True), nullable=False)

    # Snapshot at request time, for audit
    requested_salary_basis = Column(Numeric(10, 2), nullable=False)
    hourly_rate = Column(Numeric(10, 2))
    max_allowed = Column(Numeric(10, 2))
    remaining_salary_before = Column(Numeric(10, 2))

    processed_by = Column(String(128))
    processed_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)

    # Relationships
    staff = relationship("Staff", back_populates="advance_requests")
