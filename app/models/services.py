"""Medical service model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    Uuid,
    func,
    true,
)

metadata = MetaData()

services = Table(
    "services",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    Column("name", String(255), nullable=False),
    # A service hangs off a clinic, a complex department, or both
    Column("clinic_id", Uuid(as_uuid=True), index=True),
    Column("complex_department_id", Uuid(as_uuid=True), index=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
