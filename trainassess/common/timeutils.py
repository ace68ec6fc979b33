"""Timestamp helpers shared by the domain models."""

import datetime
import re
from typing import Optional

from trainassess.common.exceptions import ValidationError

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def utcnow() -> datetime.datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def today() -> str:
    """Current UTC date in ISO ``YYYY-MM-DD`` form."""
    return utcnow().date().isoformat()


def to_iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def from_iso(value) -> Optional[datetime.datetime]:
    """Parse an ISO timestamp; datetimes pass through, falsy values give None."""
    if not value:
        return None
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(value)


def validate_date(value, field_name: str = "date") -> str:
    """
    Check that a value is a calendar date written exactly as ``YYYY-MM-DD``.

    Compact (``20240101``) and week-date forms are rejected.

    Raises:
        ValidationError: If the value is not a valid date
    """
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValidationError("Invalid date", {field_name: "Date must be a YYYY-MM-DD string"})
    try:
        parsed = datetime.date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError("Invalid date", {field_name: "Date must be a YYYY-MM-DD string"}) from e
    return parsed.isoformat()
