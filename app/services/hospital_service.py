"""Hospital administration service."""

import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, ForbiddenException
from app.core.permissions import CallerContext
from app.models.hospitals import hospitals
from app.models.profiles import profiles
from app.schemas.hospitals import HospitalCreate, HospitalListResponse, HospitalResponse
from app.services.audit_service import AuditLogService

logger = structlog.get_logger()


class HospitalService:
    """Service for managing hospitals."""

    def __init__(self, db: AsyncSession, audit: AuditLogService | None = None):
        """Initialize service with database session."""
        self.db = db
        self.audit = audit or AuditLogService(db)

    async def list_hospitals(self) -> HospitalListResponse:
        """List hospitals by name, each with the number of users assigned to it."""
        counts = (
            select(
                profiles.c.hospital.label("hospital_name"),
                func.count().label("user_count"),
            )
            .group_by(profiles.c.hospital)
            .subquery()
        )
        stmt = (
            select(hospitals, func.coalesce(counts.c.user_count, 0).label("user_count"))
            .select_from(hospitals.outerjoin(counts, counts.c.hospital_name == hospitals.c.name))
            .order_by(hospitals.c.name)
        )

        result = await self.db.execute(stmt)
        items = [HospitalResponse.model_validate(dict(row)) for row in result.mappings().all()]
        return HospitalListResponse(total=len(items), items=items)

    async def create_hospital(
        self,
        caller: CallerContext,
        data: HospitalCreate,
    ) -> HospitalResponse:
        """
        Register a hospital.

        Raises:
            ForbiddenException: If the caller is not a super admin
            ConflictException: If the name is already taken
        """
        if not caller.has_full_scope:
            raise ForbiddenException("Only super admins can add hospitals")

        existing = await self.db.execute(select(hospitals.c.id).where(hospitals.c.name == data.name))
        if existing.first():
            raise ConflictException(f"Hospital '{data.name}' already exists")

        try:
            result = await self.db.execute(
                insert(hospitals).values(name=data.name).returning(hospitals)
            )
            row = dict(result.mappings().one())
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException(f"Hospital '{data.name}' already exists") from e

        logger.info("hospital_created", hospital_id=str(row["id"]), name=row["name"])
        await self.audit.log_hospital_creation(row, caller.user_id)

        return HospitalResponse.model_validate({**row, "user_count": 0})
