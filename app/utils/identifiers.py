"""Identifier parsing helpers."""

from collections.abc import Iterable
from uuid import UUID

from app.core.exceptions import ValidationException


def parse_id(value: UUID | str, field: str = "id") -> UUID:
    """
    Coerce an identifier to a UUID.

    Raises:
        ValidationException: If the value is not a well-formed UUID
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError) as e:
        raise ValidationException(
            f"Malformed identifier for {field}: {value!r}",
            details={"field": field},
        ) from e


def parse_ids(values: Iterable[UUID | str], field: str = "ids") -> list[UUID]:
    """Coerce identifiers to UUIDs, dropping duplicates while keeping order."""
    parsed: list[UUID] = []
    for value in values:
        identifier = parse_id(value, field)
        if identifier not in parsed:
            parsed.append(identifier)
    return parsed
