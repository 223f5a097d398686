from fastapi import APIRouter
from app.api.v1.endpoints.hr import advance, attendance, availability, overtime, salary, staff

api_router = APIRouter()

# HR routes
api_router.include_router(staff.router, prefix="/hr/staff", tags=["Human Resource"])
api_router.include_router(attendance.router, prefix="/hr/attendance", tags=["Human Resource"])
api_router.include_router(salary.router, prefix="/hr/salary", tags=["Human Resource"])
api_router.include_router(advance.router, prefix="/hr/advance", tags=["Human Resource"])
api_router.include_router(overtime.router, prefix="/hr/overtime", tags=["Human Resource"])
api_router.include_router(availability.router, prefix="/hr/availability", tags=["Human Resource"])
