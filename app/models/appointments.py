"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    Table,
    Text,
    Uuid,
    func,
)

# Metadata for all tables
metadata = MetaData()

# Only these may be flagged for rescheduling
RESCHEDULABLE_STATUSES = ("scheduled", "confirmed")

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    # Ownership / references
    Column("patient_id", Uuid(as_uuid=True), nullable=False),
    Column("doctor_id", Uuid(as_uuid=True), nullable=True),
    Column("clinic_id", Uuid(as_uuid=True), nullable=False),
    # Appointment details
    Column("appointment_at", DateTime(timezone=True), nullable=False),
    # Status management
    Column(
        "status",
        Text,
        nullable=False,
        server_default="scheduled",
    ),
    # Rescheduling marks
    Column("rescheduling_reason", Text, nullable=True),
    Column("marked_for_rescheduling_at", DateTime(timezone=True), nullable=True),
    Column("marked_by", Uuid(as_uuid=True), nullable=True),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    # Soft delete (healthcare compliance)
    Column("deleted_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('scheduled', 'confirmed', 'rescheduled', 'cancelled', 'completed', 'no_show')",
        name="appointments_status_check",
    ),
)

Index("idx_appointments_clinic_status", appointments.c.clinic_id, appointments.c.status)
