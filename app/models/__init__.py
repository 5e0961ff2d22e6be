"""Database models."""

from sqlalchemy import MetaData

from app.models.appointments import appointments
from app.models.appointments import metadata as appointments_metadata
from app.models.clinics import clinics
from app.models.clinics import metadata as clinics_metadata
from app.models.complexes import complexes
from app.models.complexes import metadata as complexes_metadata
from app.models.departments import complex_departments
from app.models.departments import metadata as departments_metadata
from app.models.services import metadata as services_metadata
from app.models.services import services
from app.models.users import metadata as users_metadata
from app.models.users import users
from app.models.working_hours import metadata as working_hours_metadata
from app.models.working_hours import working_hours


def combined_metadata() -> MetaData:
    """Collect every table into a single MetaData for create_all/drop_all."""
    metadata = MetaData()
    for source in (
        appointments_metadata,
        clinics_metadata,
        complexes_metadata,
        departments_metadata,
        services_metadata,
        users_metadata,
        working_hours_metadata,
    ):
        for table in source.tables.values():
            table.to_metadata(metadata)
    return metadata


__all__ = [
    "appointments",
    "clinics",
    "combined_metadata",
    "complex_departments",
    "complexes",
    "services",
    "users",
    "working_hours",
]
