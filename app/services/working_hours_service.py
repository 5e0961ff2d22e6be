"""Working hours conflict detection for clinics moving between complexes."""

from datetime import datetime, time
from typing import NamedTuple
from uuid import UUID

import structlog
from pydantic import BaseModel, Field
from sqlalchemy import select

from app.core.transaction import UnitOfWork
from app.models.clinics import clinics
from app.models.working_hours import DAYS_OF_WEEK, working_hours
from app.schemas.complexes import ConflictType, WorkingHoursConflict

logger = structlog.get_logger(__name__)


class DaySchedule(NamedTuple):
    """Operating hours of one day."""

    is_working_day: bool
    opening_time: str | None
    closing_time: str | None


# day_of_week -> hours
Schedule = dict[str, DaySchedule]


class ConflictReport(BaseModel):
    """
    Result of a conflict detection run.

    Detection never raises: when schedules cannot be loaded the report holds
    whatever was found so far, ``complete`` is False and ``error`` says why.
    """

    conflicts: list[WorkingHoursConflict] = Field(default_factory=list)
    complete: bool = True
    error: str | None = None


def parse_time(value: str | None) -> time | None:
    """Parse an ``HH:MM`` string, returning None when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return None


def merge_schedules(base: Schedule, overrides: Schedule) -> Schedule:
    """Overlay per-day overrides on a base schedule."""
    merged = dict(base)
    merged.update(overrides)
    return merged


def classify_schedule(
    clinic_id: UUID,
    clinic_name: str,
    source: Schedule,
    target: Schedule,
) -> list[WorkingHoursConflict]:
    """
    Compare a clinic's required hours against the hours a complex offers.

    Produces at most one ``no_target_hours`` or one aggregated ``missing_days``
    conflict per clinic, plus one ``time_mismatch`` per day the target opens
    later or closes earlier than the source.
    """
    if not source:
        return []

    if not target:
        return [
            WorkingHoursConflict(
                clinic_id=clinic_id,
                clinic_name=clinic_name,
                conflict_type=ConflictType.NO_TARGET_HOURS,
                details="Target complex has no working hours defined",
            )
        ]

    conflicts: list[WorkingHoursConflict] = []
    missing_days: list[str] = []

    for day in DAYS_OF_WEEK:
        source_day = source.get(day)
        if source_day is None or not source_day.is_working_day:
            continue

        target_day = target.get(day)
        if target_day is None or not target_day.is_working_day:
            missing_days.append(day)
            continue

        source_open = parse_time(source_day.opening_time)
        source_close = parse_time(source_day.closing_time)
        target_open = parse_time(target_day.opening_time)
        target_close = parse_time(target_day.closing_time)

        opens_later = (
            source_open is not None and target_open is not None and target_open > source_open
        )
        closes_earlier = (
            source_close is not None and target_close is not None and target_close < source_close
        )

        if opens_later or closes_earlier:
            conflicts.append(
                WorkingHoursConflict(
                    clinic_id=clinic_id,
                    clinic_name=clinic_name,
                    conflict_type=ConflictType.TIME_MISMATCH,
                    day_of_week=day,
                    details=(
                        f"{day.capitalize()}: source operates "
                        f"{source_day.opening_time}-{source_day.closing_time}, "
                        f"target operates {target_day.opening_time}-{target_day.closing_time}"
                    ),
                )
            )

    if missing_days:
        conflicts.insert(
            0,
            WorkingHoursConflict(
                clinic_id=clinic_id,
                clinic_name=clinic_name,
                conflict_type=ConflictType.MISSING_DAYS,
                details="Target complex has no working hours on: "
                + ", ".join(day.capitalize() for day in missing_days),
            ),
        )

    return conflicts


class WorkingHoursConflictDetector:
    """Detects working-hours conflicts for clinics being transferred."""

    async def detect_conflicts(
        self,
        uow: UnitOfWork,
        source_complex_id: UUID,
        target_complex_id: UUID,
        clinic_ids: list[UUID],
    ) -> ConflictReport:
        """
        Detect conflicts between source and target schedules for each clinic.

        A clinic's source schedule is its complex's hours overridden per day by
        the clinic's own hours. Target complexes offer complex-level hours only.
        Conflicts are advisory; failures are logged and never raised.
        """
        conflicts: list[WorkingHoursConflict] = []

        try:
            async with uow.savepoint():
                complex_hours = await self._load_schedule(uow, "complex", source_complex_id)
                target_hours = await self._load_schedule(uow, "complex", target_complex_id)
                clinic_names = await self._load_clinic_names(uow, clinic_ids)

                for clinic_id in clinic_ids:
                    clinic_hours = await self._load_schedule(uow, "clinic", clinic_id)
                    conflicts.extend(
                        classify_schedule(
                            clinic_id,
                            clinic_names.get(clinic_id, str(clinic_id)),
                            merge_schedules(complex_hours, clinic_hours),
                            target_hours,
                        )
                    )
        except Exception as e:
            logger.warning(
                "working_hours_conflict_detection_failed",
                source_complex_id=str(source_complex_id),
                target_complex_id=str(target_complex_id),
                conflicts_found=len(conflicts),
                error=str(e),
            )
            return ConflictReport(conflicts=conflicts, complete=False, error=str(e))

        if conflicts:
            logger.info(
                "working_hours_conflicts_detected",
                source_complex_id=str(source_complex_id),
                target_complex_id=str(target_complex_id),
                conflicts=len(conflicts),
            )
        return ConflictReport(conflicts=conflicts)

    @staticmethod
    async def _load_schedule(uow: UnitOfWork, entity_type: str, entity_id: UUID) -> Schedule:
        """Load the active working-hours entries of one entity, keyed by day."""
        result = await uow.execute(
            select(
                working_hours.c.day_of_week,
                working_hours.c.is_working_day,
                working_hours.c.opening_time,
                working_hours.c.closing_time,
            ).where(
                working_hours.c.entity_type == entity_type,
                working_hours.c.entity_id == entity_id,
                working_hours.c.is_active.is_(True),
            )
        )
        return {
            row.day_of_week: DaySchedule(row.is_working_day, row.opening_time, row.closing_time)
            for row in result
        }

    @staticmethod
    async def _load_clinic_names(uow: UnitOfWork, clinic_ids: list[UUID]) -> dict[UUID, str]:
        """Map clinic ids to names."""
        result = await uow.execute(
            select(clinics.c.id, clinics.c.name).where(clinics.c.id.in_(clinic_ids))
        )
        return {row.id: row.name for row in result}
