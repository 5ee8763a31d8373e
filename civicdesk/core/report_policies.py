"""Report, task and SOS policy constants."""

from __future__ import annotations

from civicdesk.models.enums import UserRole

# Coordinate bounds (inclusive)
LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0

# Pagination bounds for report listing
MIN_PAGE = 1
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

# Task details
NOTES_PREFIX = "Notes: "
NOTES_SEPARATOR = "\n\n"
DEFAULT_TASK_DETAILS = "Investigate report: {title}"

# SOS fan-out: roles notified, in order, with the priority each receives
SOS_EVENT_KIND = "SOS"
SOS_RECIPIENT_ORDER: tuple[tuple[UserRole, str], ...] = (
    (UserRole.ADMIN, "high"),
    (UserRole.STAFF, "normal"),
)

# Route-level role gates
ADMIN_ROLES = (UserRole.ADMIN, UserRole.SUPERADMIN)
TASK_ROLES = (UserRole.STAFF, UserRole.ADMIN, UserRole.SUPERADMIN)

# Nearby search radius bounds (km)
MIN_NEARBY_RADIUS_KM = 0.1
MAX_NEARBY_RADIUS_KM = 500.0

# Field length limits
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000
NOTES_MAX_LENGTH = 2000
TASK_DETAILS_MAX_LENGTH = 1000
