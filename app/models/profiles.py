"""User profile table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    Table,
    Text,
    Uuid,
    func,
)

metadata = MetaData()

profiles = Table(
    "profiles",
    metadata,
    # Shared with the identity provider (JWT ``sub``)
    Column("id", Uuid, primary_key=True),
    Column("email", Text, index=True),
    Column("first_name", Text),
    Column("last_name", Text),
    Column("role", Text, nullable=False, server_default="appointment_manager"),
    Column("hospital", Text, index=True),
    Column("clinic", Text),
    Column("specialty", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "role IN ('super_admin', 'hospital_admin', 'appointment_manager', 'analytics_viewer')",
        name="profiles_role_check",
    ),
)
