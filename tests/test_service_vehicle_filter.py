"""
Vehicle list filters: brand/model keyword (case-insensitive, partial) and
the available-for-rental switch.
"""
from fleet.services.vehicle_service import VehicleService
from helpers import put_vehicle


def seed(store):
    put_vehicle(store, plate="AA-111-A", brand="Toyota", model="Corolla")
    put_vehicle(store, plate="BB-222-B", brand="Volkswagen", model="Golf")
    put_vehicle(store, plate="CC-333-C", brand="Toyota", model="Yaris", available=False)


def test_brand_keyword_matches_brand_or_model(store):
    seed(store)
    assert {v.model for v in VehicleService.filter_vehicles(brand="toy")} == {"Corolla", "Yaris"}
    assert [v.brand for v in VehicleService.filter_vehicles(brand="GOLF")] == ["Volkswagen"]


def test_available_only(store):
    seed(store)
    plates = {v.license_plate for v in VehicleService.filter_vehicles(available_only=True)}
    assert plates == {"AA-111-A", "BB-222-B"}


def test_no_filters_returns_everything(store):
    seed(store)
    assert len(VehicleService.filter_vehicles()) == 3
