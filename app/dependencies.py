"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.core.transaction import TransactionCoordinator
from app.services.capacity_service import CapacityService
from app.services.clinic_transfer_service import ClinicTransferService
from app.services.complex_status_service import ComplexStatusService

# Security (optional: requests without a token act as the complex owner)
security = HTTPBearer(auto_error=False)


async def get_actor_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID | None:
    """
    Extract the acting user's ID from an optional bearer token.

    Args:
        credentials: Bearer token credentials, if any

    Returns:
        User ID from token, or None when no token was sent

    Raises:
        HTTPException: If a token was sent but is invalid or expired
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    user_id_str = payload.get("sub") if payload else None

    if user_id_str is None or not isinstance(user_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_transaction_coordinator(request: Request) -> TransactionCoordinator:
    """Get the process-wide transaction coordinator created at startup."""
    return request.app.state.transaction_coordinator


def get_cache_manager() -> CacheManager:
    """Get cache manager backed by the shared Redis client."""
    return CacheManager(get_redis_client())


def get_capacity_service(
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> CapacityService:
    """Get capacity service instance."""
    return CapacityService(cache_manager=cache_manager, cache_ttl=settings.capacity_cache_ttl)


def get_clinic_transfer_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_transaction_coordinator)],
    capacity_service: Annotated[CapacityService, Depends(get_capacity_service)],
) -> ClinicTransferService:
    """Get clinic transfer service instance."""
    return ClinicTransferService(coordinator, capacity_service=capacity_service)


def get_complex_status_service(
    coordinator: Annotated[TransactionCoordinator, Depends(get_transaction_coordinator)],
    transfer_service: Annotated[ClinicTransferService, Depends(get_clinic_transfer_service)],
    capacity_service: Annotated[CapacityService, Depends(get_capacity_service)],
) -> ComplexStatusService:
    """Get complex status service instance."""
    return ComplexStatusService(
        coordinator,
        transfer_service=transfer_service,
        capacity_service=capacity_service,
    )


# Type aliases for dependency injection
ActorId = Annotated[UUID | None, Depends(get_actor_id)]
CapacityServiceDep = Annotated[CapacityService, Depends(get_capacity_service)]
ClinicTransferServiceDep = Annotated[ClinicTransferService, Depends(get_clinic_transfer_service)]
ComplexStatusServiceDep = Annotated[ComplexStatusService, Depends(get_complex_status_service)]
