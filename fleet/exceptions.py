"""
Custom exception classes for the fleet reservation core.

Services raise these; the Flask app turns them into JSON error responses
(see ``fleet.controllers.errors``) instead of generic 500 errors.
"""


class FleetError(Exception):
    """Base class for every recoverable business error."""

    status_code = 400
    default_message = "Error: request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message}


# ---------- 404 ----------
class NotFoundError(FleetError):
    """Raised when a vehicle, customer or reservation cannot be found."""

    status_code = 404
    default_message = "Error: record not found"


class VehicleNotFoundError(NotFoundError):
    """Raised when a vehicle ID cannot be found in the system."""

    default_message = "Error: vehicle not found"


class CustomerNotFoundError(NotFoundError):
    """Raised when a customer ID cannot be found in the system."""

    default_message = "Error: customer not found"


class ReservationNotFoundError(NotFoundError):
    """Raised when a reservation record cannot be found in the system."""

    default_message = "Error: reservation not found"


# ---------- 400 ----------
class ValidationError(FleetError):
    """Raised for malformed input (missing fields, bad types, bad values)."""

    default_message = "Error: invalid input"


class InvalidDateRangeError(ValidationError):
    """Raised when start date is after end date or an invalid date is provided."""

    default_message = "Error: invalid date range"


# ---------- 409 ----------
class ConflictError(FleetError):
    """
    Raised when a vehicle already has an overlapping, non-cancelled reservation.

    ``conflicts`` holds the offending reservations so callers can show them.
    """

    status_code = 409
    default_message = "Error: reservation conflicts with existing bookings"

    def __init__(self, message: str | None = None, conflicts: list | None = None) -> None:
        self.conflicts = list(conflicts or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["conflicts"] = [c.to_json() for c in self.conflicts]
        return data


class InvalidStateError(FleetError):
    """Raised when an operation is not legal for the record's current state."""

    status_code = 409
    default_message = "Error: operation not allowed in the current state"


class InvalidTransitionError(FleetError):
    """Raised when a status change is not an edge of the transition table."""

    status_code = 409
    default_message = "Error: status transition not allowed"

    def __init__(self, current: str | None = None, requested: str | None = None,
                 message: str | None = None) -> None:
        self.current = current
        self.requested = requested
        if message is None and current is not None:
            message = f"Error: cannot move from '{current}' to '{requested}'"
        super().__init__(message)
