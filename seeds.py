from datetime import timedelta

from fleet import create_app
from fleet.models.store import Store
from fleet.services.common import _today
from fleet.services.customer_service import CustomerService
from fleet.services.reservation_service import ReservationService
from fleet.services.vehicle_service import VehicleService

DEMO_VEHICLES = [
    {"license_plate": "AB-123-C", "brand": "Toyota", "model": "Corolla"},
    {"license_plate": "GH-456-J", "brand": "Volkswagen", "model": "Golf"},
    {"license_plate": "KL-789-M", "brand": "Ford", "model": "Transit"},
    {"license_plate": "NP-012-R", "brand": "Renault", "model": "Clio"},
]

DEMO_CUSTOMERS = [
    {"name": "Jansen Transport", "email": "planning@jansen.example"},
    {"name": "M. de Vries", "email": "mdevries@example.com", "phone": "0612345678"},
]


def ensure_vehicle(store: Store, payload: dict) -> str:
    """
    Ensure a vehicle with the payload's license plate exists in the store.
    - If exists: leave it untouched (idempotent).
    - If not:   create a new vehicle.
    """
    existing = store.find_vehicle_by_plate(payload["license_plate"])
    if existing:
        return existing["vehicle_id"]
    return VehicleService.create_vehicle(payload, store=store).vehicle_id


def ensure_customer(store: Store, payload: dict) -> str:
    for c in store.customers.values():
        if c.get("name") == payload["name"]:
            return c["customer_id"]
    return CustomerService.create_customer(payload, store=store).customer_id


def seed(store: Store) -> dict:
    """Seed demo data; safe to run repeatedly. Returns counts per table."""
    vehicle_ids = [ensure_vehicle(store, v) for v in DEMO_VEHICLES]
    customer_ids = [ensure_customer(store, c) for c in DEMO_CUSTOMERS]

    # ---- One upcoming booking (create only if none exist) ----
    if not store.reservations:
        start = _today() + timedelta(days=2)
        ReservationService.create_reservation({
            "vehicle_id": vehicle_ids[0],
            "customer_id": customer_ids[0],
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=4)).isoformat(),
            "notes": "Demo booking",
        }, store=store)

    store.save()
    return {
        "vehicles": len(store.vehicles),
        "customers": len(store.customers),
        "reservations": len(store.reservations),
    }


def main():
    app = create_app()
    with app.app_context():
        counts = seed(Store.instance())
        app.logger.info("Seed complete: %s", counts)


if __name__ == "__main__":
    main()
