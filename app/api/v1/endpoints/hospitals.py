"""Hospital endpoints."""

from fastapi import APIRouter, Depends, status

from app.core.permissions import CallerContext, UserRole
from app.dependencies import Caller, DatabaseSession, require_roles
from app.schemas.hospitals import HospitalCreate, HospitalListResponse, HospitalResponse
from app.services.hospital_service import HospitalService

router = APIRouter()


@router.get(
    "/",
    response_model=HospitalListResponse,
    status_code=status.HTTP_200_OK,
    summary="List hospitals",
)
async def list_hospitals(caller: Caller, db: DatabaseSession) -> HospitalListResponse:
    """Hospitals ordered by name, with the number of assigned users."""
    service = HospitalService(db)
    return await service.list_hospitals()


@router.post(
    "/",
    response_model=HospitalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add hospital",
)
async def create_hospital(
    data: HospitalCreate,
    db: DatabaseSession,
    caller: CallerContext = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> HospitalResponse:
    """Register a new hospital (super admin only)."""
    service = HospitalService(db)
    return await service.create_hospital(caller, data)
