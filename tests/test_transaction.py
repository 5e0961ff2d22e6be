"""Tests for the transaction coordinator and units of work."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import OperationalError

from app.core.transaction import TransactionCapability, TransactionCoordinator
from app.models.complexes import complexes


def make_session(begin_error: Exception | None = None) -> MagicMock:
    """Build an AsyncSession double."""
    session = MagicMock()
    session.begin = AsyncMock(side_effect=begin_error)
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.mark.asyncio
async def test_probe_marks_transactions_supported():
    """A successful probe returns a transactional unit of work and caches support."""
    first, second = make_session(), make_session()
    coordinator = TransactionCoordinator(MagicMock(side_effect=[first, second]))

    uow = await coordinator.begin()

    assert uow.transactional is True
    assert uow.session is first
    assert coordinator.capability is TransactionCapability.SUPPORTED
    first.execute.assert_awaited_once()

    # Later units of work skip the probe
    await coordinator.begin()
    second.begin.assert_awaited_once()
    second.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_probe_downgrades_without_failing_caller():
    """A failing probe, even a transient one, yields a non-transactional unit of work."""
    probe = make_session(begin_error=OperationalError("BEGIN", {}, Exception("connection reset")))
    fallback = make_session()
    coordinator = TransactionCoordinator(MagicMock(side_effect=[probe, fallback]))

    uow = await coordinator.begin()

    assert uow.transactional is False
    assert uow.session is fallback
    assert coordinator.capability is TransactionCapability.UNSUPPORTED
    probe.rollback.assert_awaited_once()
    probe.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_unsupported_capability_is_never_reprobed():
    """Once unsupported, begin hands out plain sessions without trying a transaction."""
    session = make_session()
    coordinator = TransactionCoordinator(MagicMock(return_value=session))
    coordinator.capability = TransactionCapability.UNSUPPORTED

    uow = await coordinator.begin()

    assert uow.transactional is False
    session.begin.assert_not_awaited()
    assert coordinator.capability is TransactionCapability.UNSUPPORTED


@pytest.mark.asyncio
async def test_non_transactional_unit_of_work_commits_each_statement():
    """Writes outside a transaction are committed as they run; commit and abort do nothing."""
    session = make_session()
    coordinator = TransactionCoordinator(MagicMock(return_value=session))
    coordinator.capability = TransactionCapability.UNSUPPORTED

    uow = await coordinator.begin()
    await uow.execute(select(complexes.c.id))
    await uow.execute(select(complexes.c.name))

    assert session.commit.await_count == 2

    await coordinator.commit(uow)
    await coordinator.abort(uow)
    assert session.commit.await_count == 2
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_end_closes_session_once():
    """Ending a unit of work twice closes its session once."""
    session = make_session()
    coordinator = TransactionCoordinator(MagicMock(return_value=session))

    uow = await coordinator.begin()
    await coordinator.end(uow)
    await coordinator.end(uow)

    assert uow.closed is True
    session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_unit_of_work_commits_on_success(coordinator, fetch_rows):
    """Statements inside the block become visible once it completes."""
    complex_id = uuid4()

    async with coordinator.unit_of_work() as uow:
        await uow.execute(
            insert(complexes).values(id=complex_id, name="North Complex", owner_id=uuid4())
        )

    assert coordinator.capability is TransactionCapability.SUPPORTED
    rows = await fetch_rows(select(complexes.c.id).where(complexes.c.id == complex_id))
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_unit_of_work_rolls_back_and_reraises(coordinator, fetch_rows):
    """A failing block leaves no trace and its error propagates unchanged."""
    complex_id = uuid4()

    with pytest.raises(LookupError, match="boom"):
        async with coordinator.unit_of_work() as uow:
            await uow.execute(
                insert(complexes).values(id=complex_id, name="North Complex", owner_id=uuid4())
            )
            raise LookupError("boom")

    rows = await fetch_rows(select(complexes.c.id).where(complexes.c.id == complex_id))
    assert rows == []


@pytest.mark.asyncio
async def test_savepoint_contains_failure(coordinator, fetch_rows):
    """A failure inside a savepoint does not undo earlier work of the unit of work."""
    kept_id = uuid4()

    async with coordinator.unit_of_work() as uow:
        await uow.execute(
            insert(complexes).values(id=kept_id, name="Kept Complex", owner_id=uuid4())
        )
        with pytest.raises(LookupError):
            async with uow.savepoint():
                await uow.execute(
                    insert(complexes).values(id=uuid4(), name="Dropped Complex", owner_id=uuid4())
                )
                raise LookupError("inner failure")

    rows = await fetch_rows(select(complexes.c.name))
    assert [row["name"] for row in rows] == ["Kept Complex"]
