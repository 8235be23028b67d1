"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    false,
    func,
)

metadata = MetaData()

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Patient reference (name denormalized for listings)
    Column("patient_id", Text, nullable=False),
    Column("patient_name", Text, nullable=False),
    # Contact / insurance (immutable after creation)
    Column("gender", String(20)),
    Column("phone_number", String(20)),
    Column("email", Text),
    Column("address", Text),
    Column("occupation", Text),
    Column("has_insurance", Boolean, nullable=False, server_default=false()),
    Column("insurance_number", Text),
    # Scheduling (wall-clock values, no timezone)
    Column("date", Date, nullable=False),
    Column("time", String(5), nullable=False),
    # Classification
    Column("purpose", Text, nullable=False),
    Column("diagnosis", Text),
    Column("notes", Text),
    # Organizational scope, keyed by hospital *name*
    Column("hospital", Text),
    Column("clinic", Text),
    # Status management (storage vocabulary only)
    Column("status", Text, nullable=False, server_default="scheduled"),
    Column("next_review_date", Date),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('scheduled', 'completed', 'no-show', 'cancelled')",
        name="appointments_status_check",
    ),
)

Index("ix_appointments_date_time", appointments.c.date, appointments.c.time)
Index("ix_appointments_hospital_clinic", appointments.c.hospital, appointments.c.clinic)
Index("ix_appointments_status", appointments.c.status)
