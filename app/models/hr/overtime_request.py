from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Numeric, ForeignKey, Enum as SQLEnum, Date
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.enums import RequestStatus

class OvertimeRequest(BaseModel):
    __tablename__ = 'overtime_requests'

    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey('work_sessions.id'), nullable=False, unique=True)
    status = Column(SQLEnum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    requested_at = Column(DateTime(timezone=True), nullable=False)

    # Mirrored from the originating session
    shift_date = Column(Date, nullable=False)
    shift_month = Column(String(7), nullable=False, index=True)
    regular_hours = Column(Numeric(8, 4), default=0)
    ot_hours = Column(Numeric(8, 4), nullable=False)
    ot_amount = Column(Numeric(10, 2), nullable=False)
    is_night_shift = Column(Boolean, default=False)
    cross_midnight = Column(Boolean, default=False)

    processed_by = Column(String(128))
    processed_at = Column(DateTime(timezone=True))
    rejection_reason = Column(Text)

    # Relationships
    staff = relationship("Staff", back_populates="overtime_requests")
    session = relationship("WorkSession", back_populates="overtime_request")
