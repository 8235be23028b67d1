"""Database models."""

from sqlalchemy import MetaData

from app.models.appointments import appointments
from app.models.audit_logs import audit_logs
from app.models.hospitals import hospitals
from app.models.profiles import profiles

# Combined metadata for create_all (each table module owns its own MetaData)
metadata = MetaData()
for _table in (appointments, audit_logs, hospitals, profiles):
    _table.to_metadata(metadata)

__all__ = [
    "appointments",
    "audit_logs",
    "hospitals",
    "metadata",
    "profiles",
]
