from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.clock import Clock, get_clock
from app.core.config import settings
from app.core.database import get_async_session
from app.auth.jwt_handler import decode_access_token
from app.models.hr.staff import Staff
from app.models.shared.enums import UserRole
from app.services.hr.staff_service import StaffService
from app.utils.geo import DistanceGate
from app.utils.shift_calendar import ShiftCalendar
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    uid: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Get current authenticated user from the identity provider's token"""
    payload = decode_access_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = UserRole(payload.get("role", UserRole.STAFF.value))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = CurrentUser(uid=str(payload["sub"]), role=role)
    request.state.current_user = user
    return user


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """Get current user, who must be an admin"""
    if not current_user.is_admin:
        logger.warning(f"User {current_user.uid} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user


async def get_current_staff(
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session)
) -> Staff:
    """Resolve the staff record behind the current token"""
    staff = await StaffService(session).get_staff_by_uid(current_user.uid)
    if staff is None or not staff.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No active staff profile for this account"
        )
    return staff


def get_shift_calendar(clock: Clock = Depends(get_clock)) -> ShiftCalendar:
    return ShiftCalendar(clock)


def get_distance_gate() -> DistanceGate:
    return DistanceGate(
        ref_lat=settings.CAFE_LATITUDE,
        ref_lon=settings.CAFE_LONGITUDE,
        max_meters=settings.CLOCK_RADIUS_METERS,
        place_name=settings.CAFE_NAME,
    )
