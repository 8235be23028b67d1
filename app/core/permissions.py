"""Roles and role based capabilities."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    """Closed set of profile roles."""

    SUPER_ADMIN = "super_admin"
    HOSPITAL_ADMIN = "hospital_admin"
    APPOINTMENT_MANAGER = "appointment_manager"
    ANALYTICS_VIEWER = "analytics_viewer"


DEFAULT_ROLE = UserRole.APPOINTMENT_MANAGER

USER_MANAGERS = (UserRole.SUPER_ADMIN, UserRole.HOSPITAL_ADMIN)
APPOINTMENT_MANAGERS = (
    UserRole.SUPER_ADMIN,
    UserRole.HOSPITAL_ADMIN,
    UserRole.APPOINTMENT_MANAGER,
)
ANALYTICS_VIEWERS = (
    UserRole.SUPER_ADMIN,
    UserRole.HOSPITAL_ADMIN,
    UserRole.ANALYTICS_VIEWER,
)
AUDIT_LOG_VIEWERS = (UserRole.SUPER_ADMIN, UserRole.HOSPITAL_ADMIN)


@dataclass(frozen=True)
class CallerContext:
    """Identity and organizational scope of the user performing a request."""

    user_id: UUID | None
    role: UserRole
    hospital: str | None = None
    clinic: str | None = None
    email: str | None = None

    @property
    def has_full_scope(self) -> bool:
        """Top-level administrators are not restricted to one hospital."""
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_clinic_scoped(self) -> bool:
        return self.role == UserRole.APPOINTMENT_MANAGER and bool(self.clinic)

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    @property
    def can_manage_users(self) -> bool:
        return self.has_role(*USER_MANAGERS)

    @property
    def can_manage_appointments(self) -> bool:
        return self.has_role(*APPOINTMENT_MANAGERS)

    @property
    def can_view_analytics(self) -> bool:
        return self.has_role(*ANALYTICS_VIEWERS)

    @property
    def can_view_audit_logs(self) -> bool:
        return self.has_role(*AUDIT_LOG_VIEWERS)


def parse_role(value: str | None) -> UserRole:
    """Map a stored role to :class:`UserRole`, falling back to the default role."""
    try:
        return UserRole(value) if value else DEFAULT_ROLE
    except ValueError:
        return DEFAULT_ROLE

