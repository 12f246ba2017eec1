"""
Spare-vehicle substitution.

When a customer's vehicle breaks down, staff book a spare for the same
customer as a `replacement` reservation linked to the original one. An
original has at most one live (non-cancelled) replacement at a time; that
rule and the spare's own conflict check run inside one store transaction,
so two staff members clicking "assign" together get one spare, not two.

The replacement can also start life as a placeholder ("spare TBD") with no
vehicle, to be filled in once a car is free.
"""
import logging
from datetime import timedelta
from typing import Optional

from fleet.events import emit_reservation
from fleet.exceptions import ConflictError, InvalidDateRangeError, InvalidStateError, ValidationError
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.services import state_machine
from fleet.services.common import (
    _today,
    all_reservations,
    get_reservation_or_raise,
    get_vehicle_or_raise,
    resolve_store,
    setting,
)
from fleet.services.conflict_service import ConflictService
from fleet.utils.constants import TERMINAL_STATUSES, ReservationStatus, ReservationType, SpareVehicleStatus
from fleet.utils.dates import parse_date, parse_optional_date, to_iso

logger = logging.getLogger(__name__)

CLOSED_STATUSES = TERMINAL_STATUSES

# Reservation status the replacement must reach alongside each hand-over step
SPARE_DRIVES_STATUS = {
    SpareVehicleStatus.READY: ReservationStatus.CONFIRMED,
    SpareVehicleStatus.PICKED_UP: ReservationStatus.PICKED_UP,
    SpareVehicleStatus.RETURNED: ReservationStatus.RETURNED,
}


def active_replacement_for(st: Store, original_id: str) -> Optional[Reservation]:
    """The non-cancelled replacement (assigned or placeholder) of an original, if any."""
    for r in all_reservations(st):
        if (r.is_replacement and not r.is_cancelled
                and str(r.replacement_for_reservation_id) == str(original_id)):
            return r
    return None


def _load_original(st: Store, original_id: str) -> Reservation:
    """Original must exist, not be a replacement, be open and have no live spare."""
    original = get_reservation_or_raise(st, original_id)
    if original.is_replacement:
        raise InvalidStateError("Error: a replacement reservation cannot get its own spare")
    if original.status in CLOSED_STATUSES:
        raise InvalidStateError(f"Error: original reservation is {original.status.value}")
    existing = active_replacement_for(st, original.reservation_id)
    if existing is not None:
        raise InvalidStateError(
            f"Error: reservation {original.reservation_id} already has an active spare "
            f"({existing.reservation_id})")
    return original


def _window(original: Reservation, start, end) -> tuple[str, Optional[str]]:
    s = parse_date(start if start is not None else original.start_date, "start date")
    e = parse_optional_date(end if end is not None else original.end_date, "end date")
    if e is not None and s > e:
        raise InvalidDateRangeError(f"Error: start date {s.isoformat()} is after end date {e.isoformat()}")
    return to_iso(s), to_iso(e)


def _ensure_spare_free(st: Store, vehicle_id, start, end, exclude_id=None):
    conflicts = ConflictService.find_conflicts(vehicle_id, start, end, exclude_id, store=st)
    if conflicts:
        raise ConflictError("Error: spare vehicle has conflicting reservations", conflicts=conflicts)


class SpareService:
    """Assign, advance, close and look up spare-vehicle replacements."""

    @staticmethod
    def assign_spare(original_reservation_id: str, spare_vehicle_id: str, start=None, end=None,
                     store: Optional[Store] = None) -> Reservation:
        """
        Book `spare_vehicle_id` for the original's customer, by default over the
        original's own dates. Returns the new replacement (spare status 'assigned').

        Raises:
            NotFoundError: original or spare vehicle missing
            InvalidStateError: original closed / is a replacement / already has a spare,
                or the spare vehicle is switched off for rental
            ValidationError: spare is the original's own vehicle, or bad dates
            ConflictError: spare vehicle is booked in the window
        """
        st = resolve_store(store)
        with st.transaction():
            original = _load_original(st, original_reservation_id)
            spare = get_vehicle_or_raise(st, spare_vehicle_id)
            if original.vehicle_id is not None and str(spare.vehicle_id) == str(original.vehicle_id):
                raise ValidationError("Error: spare vehicle cannot be the same as the original vehicle")
            if not spare.available_for_rental:
                raise InvalidStateError(f"Error: vehicle {spare.license_plate} is not available for rental")
            start_s, end_s = _window(original, start, end)
            _ensure_spare_free(st, spare.vehicle_id, start_s, end_s)

            rid = st.create_reservation({
                "vehicle_id": spare.vehicle_id,
                "customer_id": original.customer_id,
                "start_date": start_s,
                "end_date": end_s,
                "status": ReservationStatus.PENDING.value,
                "type": ReservationType.REPLACEMENT.value,
                "replacement_for_reservation_id": original.reservation_id,
                "spare_vehicle_status": SpareVehicleStatus.ASSIGNED.value,
                "placeholder_spare": False,
                "notes": f"Spare vehicle {spare.label} for reservation #{original.reservation_id}",
            })
            created = get_reservation_or_raise(st, rid)

        logger.info("Spare %s assigned to reservation %s as %s", spare.license_plate,
                    original.reservation_id, rid)
        emit_reservation(SpareService, "spare_assigned", created)
        return created

    @staticmethod
    def advance_spare_status(replacement_id: str, new_status=None,
                             store: Optional[Store] = None) -> Reservation:
        """
        Step the hand-over assigned -> ready -> picked_up -> returned, one state
        at a time. The replacement's reservation status moves with it
        (ready = confirmed) through the regular transition table.
        """
        st = resolve_store(store)
        with st.transaction():
            r = get_reservation_or_raise(st, replacement_id)
            if not r.is_replacement:
                raise InvalidStateError("Error: reservation is not a spare replacement")
            if r.is_cancelled:
                raise InvalidStateError("Error: spare replacement is cancelled")
            if r.spare_vehicle_status is None:
                raise InvalidStateError("Error: no vehicle assigned to this placeholder yet")
            nxt = state_machine.next_spare_status(r.spare_vehicle_status, new_status)
            updates = {"spare_vehicle_status": nxt.value}
            follow = SPARE_DRIVES_STATUS[nxt]
            if r.status != follow:
                updates["status"] = state_machine.transition(r.status, follow, r.type).value
            st.update_reservation(r.reservation_id, updates)
            updated = get_reservation_or_raise(st, replacement_id)

        logger.info("Spare %s: %s -> %s", replacement_id, r.spare_vehicle_status.value, nxt.value)
        emit_reservation(SpareService, "spare_status_changed", updated)
        return updated

    @staticmethod
    def close_replacement(replacement_id: str, end_date, store: Optional[Store] = None) -> Reservation:
        """Record the actual end of a returned spare and complete it."""
        st = resolve_store(store)
        with st.transaction():
            r = get_reservation_or_raise(st, replacement_id)
            if not r.is_replacement:
                raise InvalidStateError("Error: reservation is not a spare replacement")
            if r.spare_vehicle_status != SpareVehicleStatus.RETURNED:
                raise InvalidStateError("Error: spare vehicle has not been returned yet")
            start_s, end_s = _window(r, r.start_date, end_date)
            if end_s is None:
                raise ValidationError("Error: end date is required to close a replacement")
            nxt = state_machine.transition(r.status, ReservationStatus.COMPLETED, r.type)
            _ensure_spare_free(st, r.vehicle_id, start_s, end_s, exclude_id=r.reservation_id)
            st.update_reservation(r.reservation_id, {"end_date": end_s, "status": nxt.value})
            closed = get_reservation_or_raise(st, replacement_id)

        emit_reservation(SpareService, "closed", closed)
        return closed

    @staticmethod
    def active_replacement(original_id: str, store: Optional[Store] = None) -> Optional[Reservation]:
        st = resolve_store(store)
        get_reservation_or_raise(st, original_id)
        return active_replacement_for(st, original_id)

    # ---------- placeholders ----------
    @staticmethod
    def create_placeholder(original_reservation_id: str, start=None, end=None,
                           store: Optional[Store] = None) -> Reservation:
        """Reserve a 'spare TBD' slot for the original's customer, with no vehicle yet."""
        st = resolve_store(store)
        with st.transaction():
            original = _load_original(st, original_reservation_id)
            start_s, end_s = _window(original, start, end)
            rid = st.create_reservation({
                "vehicle_id": None,
                "customer_id": original.customer_id,
                "start_date": start_s,
                "end_date": end_s,
                "status": ReservationStatus.PENDING.value,
                "type": ReservationType.REPLACEMENT.value,
                "replacement_for_reservation_id": original.reservation_id,
                "spare_vehicle_status": None,
                "placeholder_spare": True,
                "notes": f"TBD spare vehicle for reservation #{original.reservation_id}",
            })
            placeholder = get_reservation_or_raise(st, rid)

        logger.info("Placeholder spare %s created for reservation %s", rid, original.reservation_id)
        emit_reservation(SpareService, "created", placeholder)
        return placeholder

    @staticmethod
    def assign_vehicle_to_placeholder(placeholder_id: str, vehicle_id: str, end=None,
                                      store: Optional[Store] = None) -> Reservation:
        """
        Fill a placeholder with a real vehicle. Open-ended placeholders need an
        explicit end date here.
        """
        st = resolve_store(store)
        with st.transaction():
            p = get_reservation_or_raise(st, placeholder_id)
            if not (p.is_replacement and p.placeholder_spare and p.vehicle_id is None):
                raise InvalidStateError("Error: reservation is not an unassigned placeholder")
            if p.status in CLOSED_STATUSES:
                raise InvalidStateError(f"Error: placeholder is {p.status.value}")
            vehicle = get_vehicle_or_raise(st, vehicle_id)
            if not vehicle.available_for_rental:
                raise InvalidStateError(f"Error: vehicle {vehicle.license_plate} is not available for rental")
            original = get_reservation_or_raise(st, p.replacement_for_reservation_id)
            if original.vehicle_id is not None and str(original.vehicle_id) == str(vehicle.vehicle_id):
                raise ValidationError("Error: spare vehicle cannot be the same as the original vehicle")
            start_s, end_s = _window(p, p.start_date, end)
            if end_s is None:
                raise ValidationError(
                    "Error: end date must be specified when assigning a vehicle to an open-ended placeholder")
            _ensure_spare_free(st, vehicle.vehicle_id, start_s, end_s, exclude_id=p.reservation_id)
            st.update_reservation(p.reservation_id, {
                "vehicle_id": vehicle.vehicle_id,
                "end_date": end_s,
                "placeholder_spare": False,
                "spare_vehicle_status": SpareVehicleStatus.ASSIGNED.value,
                "notes": f"Spare vehicle {vehicle.label} assigned for reservation #{original.reservation_id}",
            })
            assigned = get_reservation_or_raise(st, placeholder_id)

        logger.info("Placeholder %s filled with %s", placeholder_id, vehicle.license_plate)
        emit_reservation(SpareService, "spare_assigned", assigned)
        return assigned

    @staticmethod
    def placeholders_needing_assignment(days_ahead: Optional[int] = None,
                                        store: Optional[Store] = None) -> list[Reservation]:
        """Unassigned, non-cancelled placeholders starting within `days_ahead` days (or earlier)."""
        days = int(days_ahead if days_ahead is not None else setting("PLACEHOLDER_LOOKAHEAD_DAYS"))
        cutoff = (_today() + timedelta(days=days)).isoformat()
        rows = [r for r in all_reservations(resolve_store(store))
                if r.placeholder_spare and r.vehicle_id is None and not r.is_cancelled
                and r.start_date <= cutoff]
        return sorted(rows, key=lambda r: r.start_date)
