"""User profile endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.permissions import USER_MANAGERS, CallerContext
from app.dependencies import CacheManagerDep, Caller, DatabaseSession, require_roles
from app.schemas.users import ProfileListResponse, ProfileResponse, RoleUpdate
from app.services.user_service import ProfileService

router = APIRouter(prefix="/users")

require_user_manager = require_roles(*USER_MANAGERS)


@router.get(
    "/me",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user profile",
)
async def get_my_profile(
    caller: Caller,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> ProfileResponse:
    """Profile of the authenticated user (role, hospital, clinic)."""
    profile = await ProfileService(cache_manager).get_profile(db, caller.user_id)
    return ProfileResponse.model_validate(profile)


@router.get(
    "/",
    response_model=ProfileListResponse,
    status_code=status.HTTP_200_OK,
    summary="List users",
)
async def list_users(
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    caller: CallerContext = Depends(require_user_manager),
) -> ProfileListResponse:
    """List users; hospital admins only see their own hospital."""
    return await ProfileService(cache_manager).list_profiles(db, caller)


@router.patch(
    "/{profile_id}/role",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Change user role",
)
async def change_user_role(
    profile_id: UUID,
    data: RoleUpdate,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    caller: CallerContext = Depends(require_user_manager),
) -> ProfileResponse:
    """Change a user's role; the change is recorded in the audit log."""
    return await ProfileService(cache_manager).change_role(db, caller, profile_id, data.role)
