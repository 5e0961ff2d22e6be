"""Complex model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    func,
)

metadata = MetaData()

complexes = Table(
    "complexes",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    # Basic Information
    Column("name", String(255), nullable=False, index=True),
    # Ownership
    Column("owner_id", Uuid(as_uuid=True), nullable=False, index=True),
    Column("person_in_charge_id", Uuid(as_uuid=True)),
    # Status management
    Column("status", String(20), nullable=False, server_default="active"),
    # Populated only while status != active
    Column("deactivated_at", DateTime(timezone=True)),
    Column("deactivated_by", Uuid(as_uuid=True)),
    Column("deactivation_reason", Text),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("deleted_at", DateTime(timezone=True)),  # Soft delete
    CheckConstraint(
        "status IN ('active', 'inactive', 'suspended')",
        name="complexes_status_check",
    ),
)

Index("idx_complexes_status", complexes.c.status)
