"""Initial schema - appointments, profiles, hospitals and audit logs.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Enable pgcrypto extension
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Create hospitals table
    op.create_table(
        "hospitals",
        sa.Column(
            "id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="hospitals_name_key"),
    )

    # Create profiles table (id shared with the identity provider)
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), server_default="appointment_manager", nullable=False),
        sa.Column("hospital", sa.Text(), nullable=True),
        sa.Column("clinic", sa.Text(), nullable=True),
        sa.Column("specialty", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('super_admin', 'hospital_admin', 'appointment_manager', 'analytics_viewer')",
            name="profiles_role_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])
    op.create_index("ix_profiles_hospital", "profiles", ["hospital"])

    # Create appointments table
    op.create_table(
        "appointments",
        sa.Column(
            "id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column("patient_id", sa.Text(), nullable=False),
        sa.Column("patient_name", sa.Text(), nullable=False),
        sa.Column("gender", sa.VARCHAR(length=20), nullable=True),
        sa.Column("phone_number", sa.VARCHAR(length=20), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("occupation", sa.Text(), nullable=True),
        sa.Column("has_insurance", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("insurance_number", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.VARCHAR(length=5), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("hospital", sa.Text(), nullable=True),
        sa.Column("clinic", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="scheduled", nullable=False),
        sa.Column("next_review_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled', 'completed', 'no-show', 'cancelled')",
            name="appointments_status_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_appointments_date_time", "appointments", ["date", "time"])
    op.create_index("ix_appointments_hospital_clinic", "appointments", ["hospital", "clinic"])
    op.create_index("ix_appointments_status", "appointments", ["status"])

    # Create audit_logs table (append-only)
    op.create_table(
        "audit_logs",
        sa.Column(
            "id", postgresql.UUID(), server_default=sa.text("gen_random_uuid()"), nullable=False
        ),
        sa.Column("user_id", postgresql.UUID(), nullable=True),
        sa.Column("action", sa.VARCHAR(length=10), nullable=False),
        sa.Column("table_name", sa.Text(), nullable=False),
        sa.Column("record_id", sa.Text(), nullable=False),
        sa.Column("old_data", postgresql.JSONB(), nullable=True),
        sa.Column("new_data", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("NOW()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "action IN ('create', 'update', 'delete')",
            name="audit_logs_action_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_index("ix_audit_logs_target", "audit_logs", ["table_name", "record_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("ix_audit_logs_target", table_name="audit_logs")
    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_hospital_clinic", table_name="appointments")
    op.drop_index("ix_appointments_date_time", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_profiles_hospital", table_name="profiles")
    op.drop_index("ix_profiles_email", table_name="profiles")
    op.drop_table("profiles")

    op.drop_table("hospitals")
