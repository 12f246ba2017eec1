"""Raw-row seeding helpers shared by the test modules."""


def put_vehicle(store, plate="AB-123-C", brand="Toyota", model="Corolla", available=True):
    return store.create_vehicle({
        "license_plate": plate,
        "brand": brand,
        "model": model,
        "available_for_rental": available,
    })


def put_customer(store, name="Jansen Transport"):
    return store.create_customer({"name": name})


def put_reservation(store, vehicle_id, start="2024-06-01", end="2024-06-05", status="confirmed",
                    customer_id="c1", rtype="standard", **extra):
    """Insert a raw reservation row, bypassing the service checks."""
    row = {
        "vehicle_id": vehicle_id,
        "customer_id": customer_id,
        "start_date": start,
        "end_date": end,
        "status": status,
        "type": rtype,
    }
    row.update(extra)
    return store.create_reservation(row)
