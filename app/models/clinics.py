"""Clinic model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Uuid,
    func,
    true,
)

metadata = MetaData()

clinics = Table(
    "clinics",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    Column("name", String(255), nullable=False, index=True),
    # Owning complex
    Column("complex_id", Uuid(as_uuid=True), index=True),
    # Capacity limits
    Column("max_doctors", Integer, nullable=False, server_default="0"),
    Column("max_staff", Integer, nullable=False, server_default="0"),
    Column("max_patients", Integer, nullable=False, server_default="0"),
    # Status
    Column("is_active", Boolean, nullable=False, server_default=true()),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("deleted_at", DateTime(timezone=True)),  # Soft delete
)

Index("idx_clinics_complex_active", clinics.c.complex_id, clinics.c.is_active)
