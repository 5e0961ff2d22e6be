import os
import sys
import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Load environment variables from .env file
load_dotenv()

# Settings require these; fall back to throwaway values when no .env is present
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'complex_cascade.db')}"
)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from app.config import settings
from app.core.redis_client import CacheManager
from app.core.security import create_access_token
from app.core.transaction import TransactionCoordinator
from app.database import create_engine_for, get_db
from app.dependencies import get_cache_manager, get_transaction_coordinator
from app.main import app
from app.models import (
    appointments,
    clinics,
    combined_metadata,
    complex_departments,
    complexes,
    services,
    users,
)

metadata = combined_metadata()

# Test database URL - MUST be different from production
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'complex_cascade_test.db')}",
)

# Additional safety: ensure we're not using production database
if settings.database_url == TEST_DATABASE_URL:
    print("\n❌ CRITICAL ERROR: Test database URL is same as production database!")
    print("This would DROP all production data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)

# Use NullPool to avoid event loop issues between tests
test_engine = create_engine_for(TEST_DATABASE_URL, poolclass=NullPool)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def _insert_each(session: AsyncSession, table, rows: list[dict]) -> None:
    """Insert rows one by one; rows may set different columns."""
    for row in rows:
        await session.execute(insert(table).values(**row))


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on freshly created tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def session_factory(db_session) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return TestSessionLocal


@pytest.fixture
def coordinator(session_factory) -> TransactionCoordinator:
    """Fresh transaction coordinator; capability starts unknown."""
    return TransactionCoordinator(session_factory)


@pytest.fixture
def mock_redis() -> MagicMock:
    """Redis client double that always misses."""
    redis_client = MagicMock()
    redis_client.get.return_value = None
    return redis_client


@pytest.fixture
def cache_manager(mock_redis) -> CacheManager:
    """Cache manager over the Redis double."""
    return CacheManager(redis_client=mock_redis)


@pytest.fixture
def fetch_rows(session_factory):
    """Run a query in a short-lived session so no read lock outlives the check."""

    async def _fetch(statement):
        async with session_factory() as session:
            result = await session.execute(statement)
            return result.mappings().all()

    return _fetch


@pytest.fixture
def insert_rows(session_factory):
    """Insert and commit extra rows outside the seeded data."""

    async def _insert(table, rows: list[dict]) -> None:
        async with session_factory() as session:
            await _insert_each(session, table, rows)
            await session.commit()

    return _insert


@pytest_asyncio.fixture
async def client(
    coordinator: TransactionCoordinator,
    cache_manager: CacheManager,
    session_factory,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transaction_coordinator] = lambda: coordinator
    app.dependency_overrides[get_cache_manager] = lambda: cache_manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def cascade_data(db_session: AsyncSession) -> dict:
    """
    Seed a source complex with two clinics, a department, services, staff and
    appointments, plus an active and an inactive candidate target complex.

    No working hours are seeded; tests that need conflicts add their own.
    """
    owner_id = uuid4()
    ids = {
        "owner_id": owner_id,
        "source_id": uuid4(),
        "target_id": uuid4(),
        "inactive_target_id": uuid4(),
        "empty_complex_id": uuid4(),
        "cardiology_id": uuid4(),
        "pediatrics_id": uuid4(),
        "target_clinic_id": uuid4(),
        "department_id": uuid4(),
        "doctor_id": uuid4(),
        "nurse_id": uuid4(),
        "pediatrician_id": uuid4(),
        "former_staff_id": uuid4(),
        "patient_id": uuid4(),
        "scheduled_appointment_id": uuid4(),
        "confirmed_appointment_id": uuid4(),
        "completed_appointment_id": uuid4(),
        "deleted_appointment_id": uuid4(),
    }
    soon = datetime.now(UTC) + timedelta(days=3)

    await _insert_each(
        db_session,
        complexes,
        [
            {"id": ids["source_id"], "name": "Downtown Medical Complex", "owner_id": owner_id},
            {"id": ids["target_id"], "name": "Riverside Medical Complex", "owner_id": owner_id},
            {
                "id": ids["inactive_target_id"],
                "name": "Harbor Medical Complex",
                "owner_id": owner_id,
                "status": "inactive",
            },
            {"id": ids["empty_complex_id"], "name": "Hillside Medical Complex", "owner_id": owner_id},
        ],
    )
    await _insert_each(
        db_session,
        clinics,
        [
            {
                "id": ids["cardiology_id"],
                "name": "Cardiology Clinic",
                "complex_id": ids["source_id"],
                "max_doctors": 10,
                "max_staff": 5,
                "max_patients": 100,
            },
            {
                "id": ids["pediatrics_id"],
                "name": "Pediatrics Clinic",
                "complex_id": ids["source_id"],
                "max_doctors": 15,
                "max_staff": 5,
                "max_patients": 100,
            },
            {
                "id": ids["target_clinic_id"],
                "name": "Dermatology Clinic",
                "complex_id": ids["target_id"],
                "max_doctors": 4,
                "max_staff": 2,
                "max_patients": 50,
            },
        ],
    )
    await _insert_each(
        db_session,
        complex_departments,
        [{"id": ids["department_id"], "complex_id": ids["source_id"], "name": "Radiology"}],
    )
    await _insert_each(
        db_session,
        services,
        [
            {"id": uuid4(), "name": "ECG", "clinic_id": ids["cardiology_id"]},
            {"id": uuid4(), "name": "Vaccination", "clinic_id": ids["pediatrics_id"]},
            {"id": uuid4(), "name": "X-Ray", "complex_department_id": ids["department_id"]},
            {
                "id": uuid4(),
                "name": "Stress Test",
                "clinic_id": ids["cardiology_id"],
                "is_active": False,
            },
            {"id": uuid4(), "name": "Skin Biopsy", "clinic_id": ids["target_clinic_id"]},
        ],
    )
    await _insert_each(
        db_session,
        users,
        [
            {
                "id": ids["doctor_id"],
                "email": "cardiologist@example.com",
                "role": "doctor",
                "clinic_id": ids["cardiology_id"],
                "complex_id": ids["source_id"],
            },
            {
                "id": ids["nurse_id"],
                "email": "nurse@example.com",
                "role": "nurse",
                "clinic_id": ids["cardiology_id"],
                "complex_id": ids["source_id"],
            },
            {
                "id": ids["pediatrician_id"],
                "email": "pediatrician@example.com",
                "role": "doctor",
                "clinic_id": ids["pediatrics_id"],
                "complex_id": ids["source_id"],
            },
            {
                "id": ids["former_staff_id"],
                "email": "former@example.com",
                "role": "receptionist",
                "clinic_id": ids["pediatrics_id"],
                "complex_id": ids["source_id"],
                "is_active": False,
            },
            {"id": ids["patient_id"], "email": "patient@example.com", "role": "patient"},
        ],
    )
    await _insert_each(
        db_session,
        appointments,
        [
            {
                "id": ids["scheduled_appointment_id"],
                "patient_id": ids["patient_id"],
                "doctor_id": ids["doctor_id"],
                "clinic_id": ids["cardiology_id"],
                "appointment_at": soon,
                "status": "scheduled",
            },
            {
                "id": ids["confirmed_appointment_id"],
                "patient_id": ids["patient_id"],
                "doctor_id": ids["pediatrician_id"],
                "clinic_id": ids["pediatrics_id"],
                "appointment_at": soon,
                "status": "confirmed",
            },
            {
                "id": ids["completed_appointment_id"],
                "patient_id": ids["patient_id"],
                "doctor_id": ids["doctor_id"],
                "clinic_id": ids["cardiology_id"],
                "appointment_at": soon - timedelta(days=10),
                "status": "completed",
            },
            {
                "id": ids["deleted_appointment_id"],
                "patient_id": ids["patient_id"],
                "doctor_id": ids["doctor_id"],
                "clinic_id": ids["cardiology_id"],
                "appointment_at": soon,
                "status": "scheduled",
                "deleted_at": datetime.now(UTC),
            },
        ],
    )
    await db_session.commit()

    return ids


@pytest.fixture
def actor_id():
    """Id of the user performing the change."""
    return uuid4()


@pytest.fixture
def auth_headers(actor_id) -> dict:
    """Create authentication headers for the acting user."""
    token = create_access_token(data={"sub": str(actor_id)}, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}
