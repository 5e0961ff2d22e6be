"""Create complex, clinic, service, staff, appointment and working hours tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create tables touched by the status cascade."""
    op.create_table(
        "complexes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("person_in_charge_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="active", nullable=False),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deactivated_by", sa.Uuid(), nullable=True),
        sa.Column("deactivation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'suspended')", name="complexes_status_check"
        ),
    )
    op.create_index("idx_complexes_name", "complexes", ["name"])
    op.create_index("idx_complexes_owner_id", "complexes", ["owner_id"])
    op.create_index("idx_complexes_status", "complexes", ["status"])

    op.create_table(
        "clinics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("complex_id", sa.Uuid(), nullable=True),
        sa.Column("max_doctors", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_staff", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_patients", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_clinics_name", "clinics", ["name"])
    op.create_index("idx_clinics_complex_active", "clinics", ["complex_id", "is_active"])

    op.create_table(
        "complex_departments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("complex_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_complex_departments_complex_id", "complex_departments", ["complex_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("clinic_id", sa.Uuid(), nullable=True),
        sa.Column(
            "complex_department_id",
            sa.Uuid(),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_services_clinic_id", "services", ["clinic_id"])
    op.create_index("idx_services_complex_department_id", "services", ["complex_department_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("role", sa.Text(), server_default="patient", nullable=False),
        sa.Column("clinic_id", sa.Uuid(), nullable=True),
        sa.Column("complex_id", sa.Uuid(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_users_email", "users", ["email"])
    op.create_index("idx_users_clinic_role", "users", ["clinic_id", "role"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=True),
        sa.Column("clinic_id", sa.Uuid(), nullable=False),
        sa.Column("appointment_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), server_default="scheduled", nullable=False),
        sa.Column("rescheduling_reason", sa.Text(), nullable=True),
        sa.Column("marked_for_rescheduling_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("marked_by", sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'rescheduled', 'cancelled', 'completed', 'no_show')",
            name="appointments_status_check",
        ),
    )
    op.create_index("idx_appointments_clinic_status", "appointments", ["clinic_id", "status"])

    op.create_table(
        "working_hours",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=20), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("day_of_week", sa.String(length=10), nullable=False),
        sa.Column("is_working_day", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("opening_time", sa.String(length=5), nullable=True),
        sa.Column("closing_time", sa.String(length=5), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "entity_type", "entity_id", "day_of_week", name="uq_working_hours_entity_day"
        ),
        sa.CheckConstraint(
            "entity_type IN ('complex', 'clinic')", name="working_hours_entity_type_check"
        ),
        sa.CheckConstraint(
            "day_of_week IN ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')",
            name="working_hours_day_check",
        ),
    )
    op.create_index("idx_working_hours_entity_id", "working_hours", ["entity_id"])


def downgrade() -> None:
    """Drop cascade tables."""
    op.drop_table("working_hours")
    op.drop_table("appointments")
    op.drop_table("users")
    op.drop_table("services")
    op.drop_table("complex_departments")
    op.drop_table("clinics")
    op.drop_table("complexes")
