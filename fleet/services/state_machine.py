"""
Single home of every status transition rule.

Screens and routes never compare status strings themselves; they call
`transition()` (reservation status) or `next_spare_status()` (spare
vehicle hand-over) and let these tables decide.
"""
from fleet.exceptions import InvalidTransitionError
from fleet.utils.constants import ReservationStatus as S, ReservationType, SpareVehicleStatus

RESERVATION_TRANSITIONS: dict[S, frozenset] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PICKED_UP, S.CANCELLED}),
    S.PICKED_UP: frozenset({S.RETURNED}),
    S.RETURNED: frozenset({S.COMPLETED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

# Maintenance blocks never leave the yard: they are booked confirmed and then closed.
MAINTENANCE_TRANSITIONS: dict[S, frozenset] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED}),
    S.PICKED_UP: frozenset(),
    S.RETURNED: frozenset(),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

SPARE_ORDER = list(SpareVehicleStatus)


def _coerce(value, enum_cls):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidTransitionError(message=f"Error: unknown status '{value}'") from None


def table_for(reservation_type) -> dict:
    if ReservationType(reservation_type) == ReservationType.MAINTENANCE_BLOCK:
        return MAINTENANCE_TRANSITIONS
    return RESERVATION_TRANSITIONS


def allowed_next(current, reservation_type=ReservationType.STANDARD) -> frozenset:
    return table_for(reservation_type)[_coerce(current, S)]


def can_transition(current, new, reservation_type=ReservationType.STANDARD) -> bool:
    try:
        return _coerce(new, S) in allowed_next(current, reservation_type)
    except InvalidTransitionError:
        return False


def transition(current, new, reservation_type=ReservationType.STANDARD) -> S:
    """Return the new status if `current -> new` is an edge, else raise InvalidTransitionError."""
    cur = _coerce(current, S)
    nxt = _coerce(new, S)
    if nxt not in table_for(reservation_type)[cur]:
        raise InvalidTransitionError(cur.value, nxt.value)
    return nxt


def is_terminal(status) -> bool:
    return not RESERVATION_TRANSITIONS[_coerce(status, S)]


def next_spare_status(current, requested=None) -> SpareVehicleStatus:
    """
    Spare hand-over is strictly linear: assigned -> ready -> picked_up -> returned.
    `requested=None` means "the next one"; anything else must equal it.
    """
    cur = _coerce(current, SpareVehicleStatus)
    idx = SPARE_ORDER.index(cur)
    if idx == len(SPARE_ORDER) - 1:
        raise InvalidTransitionError(cur.value, requested if requested is not None else "<none>",
                                     message=f"Error: spare vehicle already '{cur.value}'")
    nxt = SPARE_ORDER[idx + 1]
    if requested is not None and _coerce(requested, SpareVehicleStatus) != nxt:
        raise InvalidTransitionError(cur.value, SpareVehicleStatus(requested).value)
    return nxt
