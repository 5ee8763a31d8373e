"""Input checks shared by the services.

Every check raises ``ValidationFailure`` before any record is touched.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime, timezone
from typing import TypeVar

from civicdesk.core.exceptions import ValidationFailure
from civicdesk.core.report_policies import (
    LAT_MAX,
    LAT_MIN,
    LNG_MAX,
    LNG_MIN,
    MAX_PAGE_SIZE,
    MIN_PAGE,
    MIN_PAGE_SIZE,
)

E = TypeVar("E", bound=enum.Enum)


def validate_coordinates(lat: float, lng: float) -> tuple[float, float]:
    """Return (lat, lng) as floats or raise when out of range."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure("lat and lng must be numbers") from exc
    if math.isnan(lat) or not LAT_MIN <= lat <= LAT_MAX:
        raise ValidationFailure(f"lat must be between {LAT_MIN:g} and {LAT_MAX:g}, got {lat}")
    if math.isnan(lng) or not LNG_MIN <= lng <= LNG_MAX:
        raise ValidationFailure(f"lng must be between {LNG_MIN:g} and {LNG_MAX:g}, got {lng}")
    return lat, lng


def parse_enum(enum_cls: type[E], value: E | str, field: str = "status") -> E:
    """Coerce a wire value ("in_progress") to its enum member."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationFailure(f"{field} must be one of: {allowed}; got {value!r}") from exc


def validate_page(page: int, limit: int) -> tuple[int, int]:
    if page < MIN_PAGE:
        raise ValidationFailure(f"page must be at least {MIN_PAGE}")
    if not MIN_PAGE_SIZE <= limit <= MAX_PAGE_SIZE:
        raise ValidationFailure(f"limit must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}")
    return page, limit


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def require_text(value: str | None, field: str, max_length: int) -> str:
    if value is None or not value.strip():
        raise ValidationFailure(f"{field} is required")
    if len(value) > max_length:
        raise ValidationFailure(f"{field} must be at most {max_length} characters")
    return value
