from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class SalaryRecord(BaseModel):
    __tablename__ = 'salary_records'

    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False, unique=True)
    monthly_salary = Column(Numeric(10, 2), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)  # monthly_salary / (26 days * 8 hours)
    set_by = Column(String(128))

    # Relationships
    staff = relationship("Staff", back_populates="salary")
