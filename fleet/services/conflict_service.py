"""Date-range conflict detection for a single vehicle."""
import logging
from typing import Optional

from fleet.models.interval import Interval
from fleet.models.reservation import Reservation
from fleet.models.store import Store
from fleet.services.common import resolve_store

logger = logging.getLogger(__name__)


def conflicting(reservations, vehicle_id, candidate: Interval,
                exclude_reservation_id: Optional[str] = None) -> list[Reservation]:
    """
    Pure overlap filter over an iterable of Reservation objects.
    A row conflicts when it is on the same vehicle, is not cancelled, is not the
    excluded row and its inclusive interval overlaps the candidate.
    Rows without a vehicle (unassigned placeholders) never conflict.
    """
    vid = str(vehicle_id)
    found = []
    for r in reservations:
        if r.vehicle_id is None or str(r.vehicle_id) != vid:
            continue
        if r.is_cancelled:
            continue
        if exclude_reservation_id is not None and str(r.reservation_id) == str(exclude_reservation_id):
            continue
        if r.interval.overlaps(candidate):
            found.append(r)
    return found


class ConflictService:
    """
    hasConflict / findConflicts over the store.
    Callers that go on to write must call these inside `store.transaction()`.
    """

    @staticmethod
    def find_conflicts(vehicle_id, candidate_start, candidate_end=None,
                       exclude_reservation_id: Optional[str] = None,
                       store: Optional[Store] = None) -> list[Reservation]:
        """
        Return the non-cancelled reservations of `vehicle_id` overlapping
        [candidate_start, candidate_end] (end None = open-ended), sorted by start.
        An unknown vehicle id simply has no conflicts.
        """
        st = resolve_store(store)
        candidate = Interval.of(candidate_start, candidate_end)
        rows = (Reservation.from_dict(d) for d in list(st.reservations.values()))
        found = conflicting(rows, vehicle_id, candidate, exclude_reservation_id)
        if found:
            logger.info("Vehicle %s has %d conflicting reservation(s) for %s..%s",
                        vehicle_id, len(found), candidate.start, candidate.end)
        return sorted(found, key=lambda r: r.start_date)

    @staticmethod
    def has_conflict(vehicle_id, candidate_start, candidate_end=None,
                     exclude_reservation_id: Optional[str] = None,
                     store: Optional[Store] = None) -> bool:
        return bool(ConflictService.find_conflicts(
            vehicle_id, candidate_start, candidate_end, exclude_reservation_id, store=store))
