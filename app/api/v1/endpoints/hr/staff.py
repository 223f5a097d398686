from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.dependencies import CurrentUser, get_current_staff, require_admin
from app.core.database import get_async_session
from app.core.exceptions import NotFoundError
from app.models.hr.staff import Staff
from app.schemas.common.pagination import PaginatedResponse
from app.schemas.hr.staff_schema import StaffCreate, StaffResponse, StaffUpdate
from app.services.hr.staff_service import StaffService

router = APIRouter()

@router.post("/", response_model=StaffResponse)
async def create_staff(
    staff: StaffCreate,
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(require_admin)
):
    """Create a staff profile for an identity-provider account"""
    service = StaffService(session)
    return await service.create_staff(staff, current_user.uid)

@router.get("/", response_model=PaginatedResponse[StaffResponse])
async def get_staffs(
    page_index: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(require_admin)
):
    """Get all staff with filtering and pagination"""
    service = StaffService(session)
    return await service.get_staffs(
        page_index=page_index,
        page_size=page_size,
        is_active=is_active,
        search=search
    )

@router.get("/me", response_model=StaffResponse)
async def get_my_profile(staff: Staff = Depends(get_current_staff)):
    """Get the caller's staff profile"""
    return staff

@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(
    staff_id: int,
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(require_admin)
):
    service = StaffService(session)
    staff = await service.get_staff(staff_id)
    if not staff:
        raise NotFoundError("Staff not found")
    return staff

@router.put("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    data: StaffUpdate,
    session: AsyncSession = Depends(get_async_session),
    current_user: CurrentUser = Depends(require_admin)
):
    service = StaffService(session)
    return await service.update_staff(staff_id, data, current_user.uid)
