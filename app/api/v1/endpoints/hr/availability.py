from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import CurrentUser, get_current_staff, require_admin
from app.core.database import get_async_session
from app.models.hr.staff import Staff
from app.schemas.hr.availability_schema import AvailabilityResponse, AvailabilityUpdate
from app.services.hr.availability_service import AvailabilityService

router = APIRouter()

@router.put("/me", response_model=AvailabilityResponse)
async def save_my_availability(
    data: AvailabilityUpdate,
    session: AsyncSession = Depends(get_async_session),
    staff: Staff = Depends(get_current_staff)
):
    """Save the caller's weekly availability (only the days sent are replaced)"""
    service = AvailabilityService(session)
    return await service.save_availability(staff, data)

@router.get("/me", response_model=AvailabilityResponse)
async def get_my_availability(
    session: AsyncSession = Depends(get_async_session),
    staff: Staff = Depends(get_current_staff)
):
    service = AvailabilityService(session)
    return await service.get_availability(staff)

@router.get("/", response_model=List[AvailabilityResponse])
async def get_all_availabilities(
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(require_admin)
):
    service = AvailabilityService(session)
    return await service.get_all_availabilities()
