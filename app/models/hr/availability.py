from sqlalchemy import Column, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class StaffAvailability(BaseModel):
    __tablename__ = 'staff_availabilities'

    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False, unique=True)
    # {"Monday": {"available": true, "start_time": "09:00", "end_time": "17:00", "breaks": [...]}, ...}
    availabilities = Column(JSON, nullable=False, default=dict)

    # Relationships
    staff = relationship("Staff", back_populates="availability")
