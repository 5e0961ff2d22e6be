"""Complex status and clinic transfer schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ComplexStatus(str, Enum):
    """Lifecycle status of a complex."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class ConflictType(str, Enum):
    """Kinds of working-hours mismatch found during a clinic transfer."""

    NO_TARGET_HOURS = "no_target_hours"
    MISSING_DAYS = "missing_days"
    TIME_MISMATCH = "time_mismatch"


# ============================================================================
# Requests
# ============================================================================


class ComplexStatusUpdate(CamelModel):
    """Request body for changing a complex's status."""

    status: ComplexStatus = Field(
        ...,
        description="New status. inactive/suspended cascades to services, clinics and appointments.",
    )
    target_complex_id: UUID | None = Field(
        None,
        description="Complex receiving the clinics; required when deactivating a complex with active clinics",
    )
    transfer_clinics: bool = Field(
        False, description="Move the active clinics to the target complex"
    )
    deactivation_reason: str | None = Field(None, max_length=1000)


class ClinicTransferRequest(CamelModel):
    """Request body for transferring clinics between complexes."""

    target_complex_id: UUID
    clinic_ids: list[UUID] = Field(..., min_length=1)


# ============================================================================
# Responses
# ============================================================================


class ComplexResponse(CamelModel):
    """Complex as returned after a status change."""

    id: UUID
    name: str
    owner_id: UUID
    person_in_charge_id: UUID | None = None
    status: ComplexStatus
    deactivated_at: datetime | None = None
    deactivated_by: UUID | None = None
    deactivation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WorkingHoursConflict(CamelModel):
    """A mismatch between a transferred clinic's hours and its new complex's hours."""

    clinic_id: UUID
    clinic_name: str
    conflict_type: ConflictType
    details: str
    day_of_week: str | None = None


class CapacityTotals(CamelModel):
    """Summed capacity limits."""

    max_doctors: int = 0
    max_staff: int = 0
    max_patients: int = 0


class CapacityCounts(CamelModel):
    """Live headcounts."""

    doctors: int = 0
    staff: int = 0
    patients: int = 0


class ClinicCapacityBreakdown(CamelModel):
    """Capacity limits and headcounts of one clinic."""

    clinic_id: UUID
    clinic_name: str
    max_doctors: int
    max_staff: int
    max_patients: int
    current_doctors: int
    current_staff: int
    current_patients: int


class CapacityBreakdown(CamelModel):
    """Capacity and utilization of a complex across its active clinics."""

    total: CapacityTotals
    current: CapacityCounts
    utilization: CapacityCounts
    by_clinic: list[ClinicCapacityBreakdown] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class TransferResult(CamelModel):
    """Counts of rows touched by a clinic transfer."""

    clinics_transferred: int
    staff_updated: int
    appointments_marked_for_rescheduling: int
    conflicts: list[WorkingHoursConflict] = Field(default_factory=list)


class StatusChangeResult(CamelModel):
    """Outcome of a complex status change and its cascade."""

    complex: ComplexResponse
    services_deactivated: int = 0
    clinics_transferred: int | None = None
    appointments_marked_for_rescheduling: int | None = None
    target_capacity: CapacityBreakdown | None = None
