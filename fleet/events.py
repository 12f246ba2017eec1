"""
Change notifications.

Writers emit a typed signal after their transaction commits; readers
(dashboards, reports, caches) connect to the signals they care about and
decide for themselves what to refresh.

    from fleet.events import reservation_changed

    @reservation_changed.connect
    def on_reservation(sender, **payload):
        ...

Payload keys: ``action``, ``reservation_id`` / ``vehicle_id`` / ``customer_id``.
"""
import logging

from blinker import Namespace

logger = logging.getLogger(__name__)

fleet_signals = Namespace()

reservation_changed = fleet_signals.signal("reservation.changed")
vehicle_changed = fleet_signals.signal("vehicle.changed")
customer_changed = fleet_signals.signal("customer.changed")


def emit_reservation(sender, action: str, reservation) -> None:
    """Announce a write to one reservation (dataclass from fleet.models.reservation)."""
    logger.debug("reservation.%s %s", action, reservation.reservation_id)
    reservation_changed.send(
        sender,
        action=action,
        reservation_id=reservation.reservation_id,
        vehicle_id=reservation.vehicle_id,
        customer_id=reservation.customer_id,
    )


def emit_vehicle(sender, action: str, vehicle_id: str) -> None:
    logger.debug("vehicle.%s %s", action, vehicle_id)
    vehicle_changed.send(sender, action=action, vehicle_id=vehicle_id)


def emit_customer(sender, action: str, customer_id: str) -> None:
    customer_changed.send(sender, action=action, customer_id=customer_id)
