from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, ForeignKey, Enum as SQLEnum, Date
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.models.shared.enums import SessionStatus

class WorkSession(BaseModel):
    __tablename__ = 'work_sessions'

    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False, index=True)
    clock_in = Column(DateTime(timezone=True), nullable=False)
    clock_out = Column(DateTime(timezone=True))
    status = Column(SQLEnum(SessionStatus), nullable=False, default=SessionStatus.ACTIVE)

    # Shift bookkeeping, derived from clock_in
    shift_date = Column(Date, nullable=False, index=True)
    shift_month = Column(String(7), nullable=False, index=True)  # YYYY-MM
    is_night_shift = Column(Boolean, default=False)
    cross_midnight = Column(Boolean, default=False)

    # Populated once, at clock-out
    total_hours = Column(Numeric(8, 4), default=0)
    regular_hours = Column(Numeric(8, 4), default=0)
    ot_hours = Column(Numeric(8, 4), default=0)
    ot_amount = Column(Numeric(10, 2), default=0)

    clock_in_latitude = Column(Numeric(10, 8))
    clock_in_longitude = Column(Numeric(11, 8))
    clock_in_distance = Column(Numeric(10, 2))
    clock_out_latitude = Column(Numeric(10, 8))
    clock_out_longitude = Column(Numeric(11, 8))
    clock_out_distance = Column(Numeric(10, 2))

    # Relationships
    staff = relationship("Staff", back_populates="sessions")
    overtime_request = relationship("OvertimeRequest", back_populates="session", uselist=False)
