"""Complex department model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, MetaData, String, Table, Uuid, func

metadata = MetaData()

# A department as offered inside one complex
complex_departments = Table(
    "complex_departments",
    metadata,
    Column("id", Uuid(as_uuid=True), primary_key=True, default=uuid4),
    Column("complex_id", Uuid(as_uuid=True), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
