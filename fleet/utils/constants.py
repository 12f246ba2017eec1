# fleet/utils/constants.py

"""
Global constants for reservation statuses, types and spare tracking.
These constants are imported by both models and services.
"""

from enum import Enum

# Date format (used for reservation start/end)
DATE_FMT = "%Y-%m-%d"

# Stand-in end date for open-ended reservations in overlap math
OPEN_END = "9999-12-31"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PICKED_UP = "picked_up"
    RETURNED = "returned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReservationType(str, Enum):
    STANDARD = "standard"
    MAINTENANCE_BLOCK = "maintenance_block"
    REPLACEMENT = "replacement"


class SpareVehicleStatus(str, Enum):
    """Spare lifecycle. Declaration order is the only legal order."""

    ASSIGNED = "assigned"
    READY = "ready"
    PICKED_UP = "picked_up"
    RETURNED = "returned"


TERMINAL_STATUSES = frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED})
