"""Shared service helpers and factories."""

from datetime import date
from typing import Optional

from flask import current_app, has_app_context

from fleet.exceptions import (
    CustomerNotFoundError,
    ReservationNotFoundError,
    ValidationError,
    VehicleNotFoundError,
)
from fleet.models.customer import Customer
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.models.vehicle import Vehicle
from fleet.utils.dates import today as _tz_today

DEFAULTS = {
    "TIMEZONE": "Europe/Amsterdam",
    "PLACEHOLDER_LOOKAHEAD_DAYS": 7,
    "UPCOMING_LIMIT": 5,
}


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def resolve_store(store: Optional[Store] = None) -> Store:
    """Prefer an injected store (tests), else the singleton."""
    return store if store is not None else _store()


def setting(key: str):
    """Read a config value from the running app, falling back to DEFAULTS."""
    if has_app_context():
        return current_app.config.get(key, DEFAULTS.get(key))
    return DEFAULTS.get(key)


def _today() -> date:
    """Business 'today' in the configured timezone; wrapper for easier mocking."""
    return _tz_today(setting("TIMEZONE"))


def require_text(payload: dict, key: str, label: Optional[str] = None) -> str:
    """Return a stripped non-empty string field or raise ValidationError."""
    value = (payload.get(key) or "")
    value = value.strip() if isinstance(value, str) else str(value).strip()
    if not value:
        raise ValidationError(f"Error: {label or key} is required")
    return value


# -------- lookups that raise --------
def get_vehicle_or_raise(st: Store, vehicle_id) -> Vehicle:
    v = Vehicle.from_dict(st.vehicles.get(str(vehicle_id)))
    if v is None:
        raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
    return v


def get_customer_or_raise(st: Store, customer_id) -> Customer:
    c = Customer.from_dict(st.customers.get(str(customer_id)))
    if c is None:
        raise CustomerNotFoundError(f"Error: customer with ID '{customer_id}' not found")
    return c


def get_reservation_or_raise(st: Store, reservation_id) -> Reservation:
    r = Reservation.from_dict(st.reservations.get(str(reservation_id)))
    if r is None:
        raise ReservationNotFoundError(f"Error: reservation with ID '{reservation_id}' not found")
    return r


def all_reservations(st: Store) -> list[Reservation]:
    return [Reservation.from_dict(d) for d in st.reservations.values()]
