import logging
from typing import Optional

from fleet.events import emit_vehicle
from fleet.exceptions import InvalidStateError, ValidationError
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.models.vehicle import Vehicle
from fleet.services.common import get_vehicle_or_raise, require_text, resolve_store
from fleet.utils.constants import TERMINAL_STATUSES

logger = logging.getLogger(__name__)


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class VehicleService:
    """Vehicle catalogue: list, create, update, delete, calendar."""

    @staticmethod
    def all_vehicles(store: Optional[Store] = None) -> list[Vehicle]:
        st = resolve_store(store)
        return [Vehicle.from_dict(d) for d in st.vehicles.values()]

    @staticmethod
    def filter_vehicles(brand=None, available_only: bool = False, *, store=None) -> list[Vehicle]:
        """
        Case-insensitive partial match on brand or model; optionally only
        vehicles switched on for rental.
        """
        res = VehicleService.all_vehicles(store)
        if brand:
            kw = brand.strip().lower()
            res = [v for v in res if kw in v.brand.lower() or kw in v.model.lower()]
        if available_only:
            res = [v for v in res if v.available_for_rental]
        return res

    @staticmethod
    def get_vehicle(vid: str, store: Optional[Store] = None) -> Vehicle:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        return get_vehicle_or_raise(resolve_store(store), vid)

    @staticmethod
    def create_vehicle(payload: dict, store: Optional[Store] = None) -> Vehicle:
        """Create a vehicle; license plates are unique regardless of case."""
        st = resolve_store(store)
        plate = require_text(payload, "license_plate", "license plate").upper()
        brand = require_text(payload, "brand")
        model = require_text(payload, "model")

        with st.transaction():
            if st.find_vehicle_by_plate(plate):
                raise ValidationError(f"Error: license plate '{plate}' already exists")
            vid = st.create_vehicle({
                "license_plate": plate,
                "brand": brand,
                "model": model,
                "available_for_rental": _to_bool(payload.get("available_for_rental", True)),
            })

        logger.info("Vehicle %s created (%s)", vid, plate)
        emit_vehicle(VehicleService, "created", vid)
        return get_vehicle_or_raise(st, vid)

    @staticmethod
    def update_vehicle(vid: str, changes: dict, store: Optional[Store] = None) -> Vehicle:
        st = resolve_store(store)
        updates = {}
        with st.transaction():
            get_vehicle_or_raise(st, vid)
            if "license_plate" in changes:
                plate = require_text(changes, "license_plate", "license plate").upper()
                other = st.find_vehicle_by_plate(plate)
                if other and other["vehicle_id"] != str(vid):
                    raise ValidationError(f"Error: license plate '{plate}' already exists")
                updates["license_plate"] = plate
            for key in ("brand", "model"):
                if key in changes:
                    updates[key] = require_text(changes, key)
            if "available_for_rental" in changes:
                updates["available_for_rental"] = _to_bool(changes["available_for_rental"])
            st.update_vehicle(str(vid), **updates)

        emit_vehicle(VehicleService, "updated", str(vid))
        return get_vehicle_or_raise(st, vid)

    @staticmethod
    def delete_vehicle(vehicle_id: str, store: Optional[Store] = None) -> None:
        """
        Delete a vehicle if and only if:
        - the vehicle exists,
        - no reservation (of any status) references it.
        Vehicles with history are retired by switching available_for_rental off.
        """
        st = resolve_store(store)
        with st.transaction():
            get_vehicle_or_raise(st, vehicle_id)
            refs = [Reservation.from_dict(d) for d in st.reservations.values()
                    if str(d.get("vehicle_id")) == str(vehicle_id)]
            if refs:
                active = [r for r in refs if r.status not in TERMINAL_STATUSES]
                detail = f"{len(active)} active" if active else "historical"
                raise InvalidStateError(
                    f"Error: cannot delete vehicle with {detail} reservations; "
                    f"mark it not available for rental instead")
            st.delete_vehicle(str(vehicle_id))

        logger.info("Vehicle %s deleted", vehicle_id)
        emit_vehicle(VehicleService, "deleted", str(vehicle_id))

    @staticmethod
    def calendar(vehicle_id: str, store: Optional[Store] = None) -> list[tuple[str, Optional[str]]]:
        """
        Return sorted (start, end) pairs of non-cancelled reservations.
        Used by the UI to disable booked date ranges; end None = open-ended.
        """
        st = resolve_store(store)
        get_vehicle_or_raise(st, vehicle_id)
        ranges = []
        for d in st.reservations.values():
            r = Reservation.from_dict(d)
            if str(r.vehicle_id) != str(vehicle_id) or r.is_cancelled:
                continue
            ranges.append((r.start_date, r.end_date))
        ranges.sort(key=lambda t: t[0])  # stable for UI
        return ranges
