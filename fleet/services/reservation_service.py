"""Reservation-related service layer: booking, edits, status changes, queries."""

import logging
from typing import Optional

from fleet.events import emit_reservation
from fleet.exceptions import ConflictError, InvalidDateRangeError, InvalidStateError, ValidationError
from fleet.models.interval import Interval
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.services import state_machine
from fleet.services.common import (
    _today,
    all_reservations,
    get_customer_or_raise,
    get_reservation_or_raise,
    get_vehicle_or_raise,
    resolve_store,
    setting,
)
from fleet.services.conflict_service import ConflictService
from fleet.services.spare_service import active_replacement_for
from fleet.utils.constants import ReservationStatus, ReservationType
from fleet.utils.dates import parse_date, parse_optional_date, to_iso

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("vehicle_id", "customer_id", "start_date", "end_date", "notes", "total_price")


def _price(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return round(float(value), 2)
    except (TypeError, ValueError):
        raise ValidationError(f"Error: invalid total price {value!r}") from None


def _dates(start, end) -> tuple[str, Optional[str]]:
    """Validate a (start, end) pair and return it as ISO strings; end may be None."""
    s = parse_date(start, "start date")
    e = parse_optional_date(end, "end date")
    if e is not None and s > e:
        raise InvalidDateRangeError(f"Error: start date {s.isoformat()} is after end date {e.isoformat()}")
    return to_iso(s), to_iso(e)


def _ensure_free(st: Store, vehicle_id, start, end, exclude_id=None):
    conflicts = ConflictService.find_conflicts(vehicle_id, start, end, exclude_id, store=st)
    if conflicts:
        raise ConflictError(conflicts=conflicts)


class ReservationService:
    """
    Create, edit, cancel and query reservations.
    Every check-then-write runs inside one store transaction.
    """

    # ---------- writes ----------
    @staticmethod
    def create_reservation(payload: dict, store: Optional[Store] = None) -> Reservation:
        """
        Book a standard reservation.
        Required: vehicle_id, customer_id, start_date. end_date None = open-ended.
        Raises NotFoundError, ValidationError, InvalidStateError or ConflictError.
        """
        st = resolve_store(store)
        rtype = payload.get("type") or ReservationType.STANDARD.value
        if rtype != ReservationType.STANDARD.value:
            raise ValidationError("Error: only standard reservations can be created here")
        if not payload.get("vehicle_id") or not payload.get("customer_id"):
            raise ValidationError("Error: vehicle_id and customer_id are required")
        start, end = _dates(payload.get("start_date"), payload.get("end_date"))

        with st.transaction():
            vehicle = get_vehicle_or_raise(st, payload["vehicle_id"])
            customer = get_customer_or_raise(st, payload["customer_id"])
            if not vehicle.available_for_rental:
                raise InvalidStateError(f"Error: vehicle {vehicle.license_plate} is not available for rental")
            _ensure_free(st, vehicle.vehicle_id, start, end)
            rid = st.create_reservation({
                "vehicle_id": vehicle.vehicle_id,
                "customer_id": customer.customer_id,
                "start_date": start,
                "end_date": end,
                "status": ReservationStatus.PENDING.value,
                "type": ReservationType.STANDARD.value,
                "notes": payload.get("notes"),
                "total_price": _price(payload.get("total_price")),
            })
            created = get_reservation_or_raise(st, rid)

        logger.info("Reservation %s booked: vehicle %s %s..%s", rid, vehicle.license_plate, start, end or "open")
        emit_reservation(ReservationService, "created", created)
        return created

    @staticmethod
    def update_reservation(rid: str, changes: dict, store: Optional[Store] = None) -> Reservation:
        """
        Edit dates, vehicle, customer, notes or price.
        The reservation's own row is excluded from the conflict re-check.
        Status is changed only through change_status().
        """
        st = resolve_store(store)
        if "status" in changes:
            raise ValidationError("Error: use the status endpoint to change status")
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Error: fields not editable: {', '.join(sorted(unknown))}")

        with st.transaction():
            current = get_reservation_or_raise(st, rid)
            if state_machine.is_terminal(current.status):
                raise InvalidStateError(f"Error: reservation is {current.status.value}")

            updates: dict = {}
            vehicle_id = current.vehicle_id
            if "vehicle_id" in changes and str(changes["vehicle_id"]) != str(current.vehicle_id):
                if current.type != ReservationType.STANDARD:
                    raise InvalidStateError(f"Error: cannot move a {current.type.value} to another vehicle")
                vehicle = get_vehicle_or_raise(st, changes["vehicle_id"])
                if not vehicle.available_for_rental:
                    raise InvalidStateError(f"Error: vehicle {vehicle.license_plate} is not available for rental")
                vehicle_id = vehicle.vehicle_id
                updates["vehicle_id"] = vehicle_id
            if "customer_id" in changes:
                updates["customer_id"] = get_customer_or_raise(st, changes["customer_id"]).customer_id

            start = changes.get("start_date", current.start_date)
            end = changes.get("end_date", current.end_date)
            start, end = _dates(start, end)
            if (start, end) != (current.start_date, current.end_date):
                updates["start_date"], updates["end_date"] = start, end

            if vehicle_id is not None and ({"vehicle_id", "start_date", "end_date"} & set(updates)):
                _ensure_free(st, vehicle_id, start, end, exclude_id=current.reservation_id)

            if "notes" in changes:
                updates["notes"] = changes["notes"]
            if "total_price" in changes:
                updates["total_price"] = _price(changes["total_price"])

            st.update_reservation(current.reservation_id, updates)
            updated = get_reservation_or_raise(st, rid)

        emit_reservation(ReservationService, "updated", updated)
        return updated

    @staticmethod
    def change_status(rid: str, new_status, store: Optional[Store] = None) -> Reservation:
        """
        Move a reservation along the transition table.
        Cancelling an original also cancels its spare while that spare is
        still pending or confirmed.
        Replacements and maintenance blocks only accept a cancel here; they
        move forward through the spare hand-over and the close routes.
        """
        st = resolve_store(store)
        cascaded = None
        with st.transaction():
            current = get_reservation_or_raise(st, rid)
            nxt = state_machine.transition(current.status, new_status, current.type)
            if current.type != ReservationType.STANDARD and nxt != ReservationStatus.CANCELLED:
                route = "close" if current.is_maintenance else "spare-status or close"
                raise InvalidStateError(
                    f"Error: a {current.type.value} moves to '{nxt.value}' through the {route} route")
            st.update_reservation(current.reservation_id, {"status": nxt.value})

            if nxt == ReservationStatus.CANCELLED and not current.is_replacement:
                spare = active_replacement_for(st, current.reservation_id)
                if spare and state_machine.can_transition(spare.status, ReservationStatus.CANCELLED):
                    st.update_reservation(spare.reservation_id, {"status": ReservationStatus.CANCELLED.value})
                    cascaded = get_reservation_or_raise(st, spare.reservation_id)
            updated = get_reservation_or_raise(st, rid)

        logger.info("Reservation %s: %s -> %s", rid, current.status.value, nxt.value)
        emit_reservation(ReservationService, "status_changed", updated)
        if cascaded is not None:
            logger.info("Spare reservation %s cancelled with its original %s", cascaded.reservation_id, rid)
            emit_reservation(ReservationService, "status_changed", cascaded)
        return updated

    @staticmethod
    def cancel(rid: str, store: Optional[Store] = None) -> Reservation:
        return ReservationService.change_status(rid, ReservationStatus.CANCELLED, store=store)

    # ---------- maintenance blocks ----------
    @staticmethod
    def create_maintenance_block(vehicle_id: str, start, end=None, notes: Optional[str] = None,
                                 store: Optional[Store] = None) -> Reservation:
        """Take a vehicle off the road for [start, end]; end None = until closed."""
        st = resolve_store(store)
        start, end = _dates(start, end)
        with st.transaction():
            vehicle = get_vehicle_or_raise(st, vehicle_id)
            _ensure_free(st, vehicle.vehicle_id, start, end)
            rid = st.create_reservation({
                "vehicle_id": vehicle.vehicle_id,
                "customer_id": None,
                "start_date": start,
                "end_date": end,
                "status": ReservationStatus.CONFIRMED.value,
                "type": ReservationType.MAINTENANCE_BLOCK.value,
                "notes": notes or "Vehicle maintenance block",
            })
            block = get_reservation_or_raise(st, rid)

        logger.info("Maintenance block %s on vehicle %s from %s", rid, vehicle.license_plate, start)
        emit_reservation(ReservationService, "created", block)
        return block

    @staticmethod
    def close_maintenance_block(rid: str, end_date, store: Optional[Store] = None) -> Reservation:
        st = resolve_store(store)
        with st.transaction():
            block = get_reservation_or_raise(st, rid)
            if not block.is_maintenance:
                raise InvalidStateError("Error: reservation is not a maintenance block")
            start, end = _dates(block.start_date, end_date)
            if end is None:
                raise ValidationError("Error: end date is required to close a maintenance block")
            nxt = state_machine.transition(block.status, ReservationStatus.COMPLETED, block.type)
            _ensure_free(st, block.vehicle_id, start, end, exclude_id=block.reservation_id)
            st.update_reservation(block.reservation_id, {"end_date": end, "status": nxt.value})
            closed = get_reservation_or_raise(st, rid)

        emit_reservation(ReservationService, "closed", closed)
        return closed

    # ---------- queries ----------
    @staticmethod
    def get(rid: str, store: Optional[Store] = None) -> Reservation:
        return get_reservation_or_raise(resolve_store(store), rid)

    @staticmethod
    def all(store: Optional[Store] = None) -> list[Reservation]:
        return sorted(all_reservations(resolve_store(store)), key=lambda r: r.start_date, reverse=True)

    @staticmethod
    def in_range(start, end, store: Optional[Store] = None) -> list[Reservation]:
        """Every reservation (any status) whose interval touches [start, end]."""
        window = Interval.of(start, end)
        rows = [r for r in all_reservations(resolve_store(store)) if r.interval.overlaps(window)]
        return sorted(rows, key=lambda r: r.start_date)

    @staticmethod
    def upcoming(limit: Optional[int] = None, store: Optional[Store] = None) -> list[Reservation]:
        """Next non-cancelled reservations starting today or later."""
        limit = int(limit if limit is not None else setting("UPCOMING_LIMIT"))
        today = _today().isoformat()
        rows = [r for r in all_reservations(resolve_store(store))
                if r.start_date >= today and not r.is_cancelled]
        return sorted(rows, key=lambda r: r.start_date)[:limit]

    @staticmethod
    def overdue(store: Optional[Store] = None) -> list[Reservation]:
        """Picked-up rentals whose end date has passed without a return."""
        today = _today().isoformat()
        rows = [r for r in all_reservations(resolve_store(store))
                if r.status == ReservationStatus.PICKED_UP and r.end_date and r.end_date < today]
        return sorted(rows, key=lambda r: r.end_date)

    @staticmethod
    def by_vehicle(vehicle_id: str, store: Optional[Store] = None) -> list[Reservation]:
        st = resolve_store(store)
        get_vehicle_or_raise(st, vehicle_id)
        rows = [r for r in all_reservations(st) if str(r.vehicle_id) == str(vehicle_id)]
        return sorted(rows, key=lambda r: r.start_date, reverse=True)

    @staticmethod
    def by_customer(customer_id: str, store: Optional[Store] = None) -> list[Reservation]:
        st = resolve_store(store)
        get_customer_or_raise(st, customer_id)
        rows = [r for r in all_reservations(st) if str(r.customer_id) == str(customer_id)]
        return sorted(rows, key=lambda r: r.start_date, reverse=True)
