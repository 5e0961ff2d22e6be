"""User model definition using SQLAlchemy Core.

Staff members carry the clinic and complex they work in, which is what the
clinic transfer keeps in sync.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    Uuid,
    func,
    true,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    Column("email", Text, nullable=False, index=True),
    Column("full_name", Text),
    Column("phone", String(20)),
    # doctor, nurse, receptionist, admin, owner, patient, ...
    Column("role", Text, nullable=False, server_default="patient"),
    # Workplace
    Column("clinic_id", Uuid(as_uuid=True)),
    Column("complex_id", Uuid(as_uuid=True)),
    # Account state
    Column("is_active", Boolean, nullable=False, server_default=true()),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

Index("idx_users_clinic_role", users.c.clinic_id, users.c.role)
