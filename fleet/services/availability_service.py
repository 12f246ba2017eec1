"""Which vehicles are free for a date range."""
from typing import Iterable, Optional

from fleet.models.interval import Interval
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.models.vehicle import Vehicle
from fleet.services.common import _today, resolve_store
from fleet.services.conflict_service import conflicting


def find_available(fleet: Iterable[Vehicle], start, end,
                   reservations: Optional[Iterable[Reservation]] = None,
                   store: Optional[Store] = None) -> list[Vehicle]:
    """
    Keep each vehicle that is available_for_rental and has no conflicting
    reservation in [start, end]. Input order is preserved; callers sort for display.
    Reservations default to every row in the store.
    """
    candidate = Interval.of(start, end)
    if reservations is None:
        reservations = [Reservation.from_dict(d) for d in list(resolve_store(store).reservations.values())]
    rows = list(reservations)
    return [
        v for v in fleet
        if v.available_for_rental and not conflicting(rows, v.vehicle_id, candidate)
    ]


class AvailabilityService:

    @staticmethod
    def available_vehicles(start, end, exclude_vehicle_id: Optional[str] = None,
                           store: Optional[Store] = None) -> list[Vehicle]:
        """
        Run find_available against the whole fleet (insertion order).
        `exclude_vehicle_id` drops one vehicle, e.g. the broken one a spare is
        being picked for.
        """
        st = resolve_store(store)
        fleet = [Vehicle.from_dict(d) for d in list(st.vehicles.values())]
        if exclude_vehicle_id is not None:
            fleet = [v for v in fleet if str(v.vehicle_id) != str(exclude_vehicle_id)]
        return find_available(fleet, start, end, store=st)

    @staticmethod
    def available_today(store: Optional[Store] = None) -> list[Vehicle]:
        day = _today()
        return AvailabilityService.available_vehicles(day, day, store=store)
