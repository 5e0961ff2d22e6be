"""Working hours model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    Uuid,
    func,
    true,
)

metadata = MetaData()

DAYS_OF_WEEK = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

working_hours = Table(
    "working_hours",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    # Scope: 'complex' or 'clinic'
    Column("entity_type", String(20), nullable=False),
    Column("entity_id", Uuid(as_uuid=True), nullable=False, index=True),
    Column("day_of_week", String(10), nullable=False),
    Column("is_working_day", Boolean, nullable=False, server_default=true()),
    Column("opening_time", String(5)),  # HH:MM
    Column("closing_time", String(5)),  # HH:MM
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("entity_type", "entity_id", "day_of_week", name="uq_working_hours_entity_day"),
    CheckConstraint("entity_type IN ('complex', 'clinic')", name="working_hours_entity_type_check"),
    CheckConstraint(
        "day_of_week IN ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')",
        name="working_hours_day_check",
    ),
)
