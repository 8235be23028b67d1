"""User profile service: caller context resolution and role management."""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, NotFoundException
from app.core.permissions import CallerContext, UserRole, parse_role
from app.core.redis_client import CacheManager
from app.models.profiles import profiles
from app.schemas.users import ProfileListResponse, ProfileResponse
from app.services.audit_service import AuditLogService

logger = structlog.get_logger()


def build_caller_context(profile: Mapping[str, Any]) -> CallerContext:
    """Turn a stored (or cached) profile into the context passed to core operations."""
    return CallerContext(
        user_id=UUID(str(profile["id"])),
        role=parse_role(profile.get("role")),
        hospital=profile.get("hospital") or None,
        clinic=profile.get("clinic") or None,
        email=profile.get("email"),
    )


class ProfileService:
    """Service for user profile operations."""

    # Cache TTL in seconds (5 minutes; role changes invalidate explicitly)
    PROFILE_CACHE_TTL = 300

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_profile_cache_key(profile_id: UUID) -> str:
        return f"profile:{profile_id}"

    async def get_profile(self, db: AsyncSession, profile_id: UUID) -> dict | None:
        """Get a profile by ID with caching."""
        if self.cache:
            cached = self.cache.get_json(self._get_profile_cache_key(profile_id))
            if cached:
                return cached

        result = await db.execute(select(profiles).where(profiles.c.id == profile_id))
        profile = result.mappings().first()
        if not profile:
            return None

        profile_dict = dict(profile)
        if self.cache:
            self.cache.set_json(
                self._get_profile_cache_key(profile_id),
                profile_dict,
                ttl=self.PROFILE_CACHE_TTL,
            )
        return profile_dict

    async def list_profiles(self, db: AsyncSession, caller: CallerContext) -> ProfileListResponse:
        """
        List profiles a user manager may administer.

        Hospital admins only see their own hospital.
        """
        if not caller.can_manage_users:
            raise ForbiddenException("Your role cannot manage users")

        query = select(profiles)
        count_query = select(func.count()).select_from(profiles)
        if not caller.has_full_scope:
            query = query.where(profiles.c.hospital == caller.hospital)
            count_query = count_query.where(profiles.c.hospital == caller.hospital)

        total = (await db.execute(count_query)).scalar() or 0
        result = await db.execute(query.order_by(profiles.c.last_name, profiles.c.first_name))
        items = [ProfileResponse.model_validate(dict(row)) for row in result.mappings().all()]
        return ProfileListResponse(total=total, items=items)

    async def change_role(
        self,
        db: AsyncSession,
        caller: CallerContext,
        profile_id: UUID,
        new_role: UserRole,
        audit: AuditLogService | None = None,
    ) -> ProfileResponse:
        """
        Change a user's role and record it in the audit trail.

        Args:
            db: Database session
            caller: Acting user manager
            profile_id: Profile to change
            new_role: Role to grant
            audit: Audit recorder (defaults to one on ``db``)

        Returns:
            Updated profile

        Raises:
            ForbiddenException: If the caller may not make this change
            NotFoundException: If the profile does not exist
        """
        if not caller.can_manage_users:
            raise ForbiddenException("Your role cannot manage users")

        result = await db.execute(select(profiles).where(profiles.c.id == profile_id))
        target = result.mappings().first()
        if not target:
            raise NotFoundException("User not found")

        if not caller.has_full_scope:
            if target["role"] == UserRole.SUPER_ADMIN.value or new_role == UserRole.SUPER_ADMIN:
                raise ForbiddenException("Only super admins can manage super admin accounts")
            if target["hospital"] != caller.hospital:
                raise ForbiddenException("User belongs to another hospital")

        old_role = target["role"]
        result = await db.execute(
            update(profiles)
            .where(profiles.c.id == profile_id)
            .values(role=new_role.value, updated_at=datetime.now(UTC))
            .returning(profiles)
        )
        updated = dict(result.mappings().one())
        await db.commit()

        if self.cache:
            self.cache.delete(self._get_profile_cache_key(profile_id))

        logger.info(
            "user_role_changed",
            profile_id=str(profile_id),
            old_role=old_role,
            new_role=new_role.value,
            user_id=str(caller.user_id),
        )
        await (audit or AuditLogService(db)).log_role_change(
            profile_id, old_role, new_role.value, caller.user_id
        )

        return ProfileResponse.model_validate(updated)
