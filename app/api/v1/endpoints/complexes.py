"""Complex status and clinic transfer endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import (
    ActorId,
    CapacityServiceDep,
    ClinicTransferServiceDep,
    ComplexStatusServiceDep,
)
from app.schemas.complexes import (
    CapacityBreakdown,
    ClinicTransferRequest,
    ComplexStatusUpdate,
    StatusChangeResult,
    TransferResult,
)

router = APIRouter()


@router.patch(
    "/{complex_id}/status",
    response_model=StatusChangeResult,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
async def update_complex_status(
    complex_id: UUID,
    status_update: ComplexStatusUpdate,
    complex_status_service: ComplexStatusServiceDep,
    actor_id: ActorId,
):
    """
    Change a complex's status.

    - **status**: active, inactive or suspended
    - **targetComplexId**: Active complex receiving the clinics (required when
      deactivating a complex that still has active clinics)
    - **transferClinics**: Move the active clinics to the target complex
    - **deactivationReason**: Free-text reason stored on the complex

    Deactivation switches off every service of the complex and, when
    requested, moves its clinics and their staff. All changes are applied
    atomically.
    """
    return await complex_status_service.change_status(complex_id, status_update, actor_id)


@router.post(
    "/{complex_id}/transfer-clinics",
    response_model=TransferResult,
    status_code=status.HTTP_200_OK,
)
async def transfer_clinics(
    complex_id: UUID,
    transfer_request: ClinicTransferRequest,
    transfer_service: ClinicTransferServiceDep,
    actor_id: ActorId,
):
    """
    Transfer clinics to another complex.

    - **targetComplexId**: Active complex receiving the clinics
    - **clinicIds**: Clinics to move; all must belong to this complex

    Staff follow their clinic. Working-hours conflicts with the target are
    reported and the affected appointments are marked for rescheduling.
    """
    return await transfer_service.transfer_clinics(
        complex_id,
        transfer_request.target_complex_id,
        transfer_request.clinic_ids,
        actor_id,
    )


@router.get("/{complex_id}/capacity", response_model=CapacityBreakdown)
async def get_complex_capacity(
    complex_id: UUID,
    capacity_service: CapacityServiceDep,
    db: AsyncSession = Depends(get_db),
):
    """
    Get capacity and utilization of a complex.

    Sums the limits of the complex's active clinics, counts the doctors,
    staff and patients currently assigned, and recommends action for any
    resource above 100% utilization.
    """
    return await capacity_service.get_capacity(db, complex_id)
