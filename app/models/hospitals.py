"""Hospital table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, MetaData, Table, Text, Uuid, func

metadata = MetaData()

hospitals = Table(
    "hospitals",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Display key; appointments and profiles reference hospitals by name
    Column("name", Text, nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
