"""
Reservation lifecycle: booking checks, edits re-checked against everything
but the reservation itself, the central status table, and dashboard queries.
"""
import pytest

from fleet.exceptions import (
    ConflictError,
    CustomerNotFoundError,
    InvalidDateRangeError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
    VehicleNotFoundError,
)
from fleet.services.reservation_service import ReservationService
from fleet.services.spare_service import SpareService
from helpers import put_customer, put_reservation, put_vehicle


@pytest.fixture
def fleet(store):
    return {
        "v1": put_vehicle(store, plate="AA-111-A"),
        "v2": put_vehicle(store, plate="BB-222-B"),
        "c1": put_customer(store),
    }


def book(fleet, start="2024-06-01", end="2024-06-05", vehicle="v1"):
    return ReservationService.create_reservation({
        "vehicle_id": fleet[vehicle], "customer_id": fleet["c1"], "start_date": start, "end_date": end,
    })


# ---------- create ----------
def test_create_starts_pending(fleet, store):
    r = book(fleet)
    assert r.status.value == "pending"
    assert r.type.value == "standard"
    assert store.reservations[r.reservation_id]["start_date"] == "2024-06-01"


def test_create_open_ended(fleet):
    r = book(fleet, end=None)
    assert r.end_date is None
    with pytest.raises(ConflictError):
        book(fleet, start="2025-01-01", end="2025-01-02")


def test_create_validates_references(fleet):
    with pytest.raises(VehicleNotFoundError):
        ReservationService.create_reservation({
            "vehicle_id": "nope", "customer_id": fleet["c1"], "start_date": "2024-06-01"})
    with pytest.raises(CustomerNotFoundError):
        ReservationService.create_reservation({
            "vehicle_id": fleet["v1"], "customer_id": "nope", "start_date": "2024-06-01"})
    with pytest.raises(ValidationError):
        ReservationService.create_reservation({"start_date": "2024-06-01"})


def test_create_rejects_inverted_dates(fleet):
    with pytest.raises(InvalidDateRangeError):
        book(fleet, start="2024-06-05", end="2024-06-01")


def test_create_rejects_vehicle_not_for_rental(fleet, store):
    store.vehicles[fleet["v1"]]["available_for_rental"] = False
    with pytest.raises(InvalidStateError):
        book(fleet)


def test_create_only_standard(fleet):
    with pytest.raises(ValidationError):
        ReservationService.create_reservation({
            "vehicle_id": fleet["v1"], "customer_id": fleet["c1"], "start_date": "2024-06-01",
            "type": "replacement"})


def test_failed_create_writes_nothing(fleet, store):
    book(fleet)
    before = dict(store.reservations)
    with pytest.raises(ConflictError):
        book(fleet, start="2024-06-03", end="2024-06-04")
    assert store.reservations == before


# ---------- update ----------
def test_update_excludes_own_row(fleet):
    r = book(fleet)
    moved = ReservationService.update_reservation(r.reservation_id, {"end_date": "2024-06-08"})
    assert moved.end_date == "2024-06-08"


def test_update_conflicts_with_other_rows(fleet):
    r = book(fleet)
    book(fleet, start="2024-06-10", end="2024-06-12")
    with pytest.raises(ConflictError):
        ReservationService.update_reservation(r.reservation_id, {"end_date": "2024-06-10"})


def test_update_move_to_other_vehicle(fleet):
    r = book(fleet)
    book(fleet, vehicle="v2", start="2024-06-04", end="2024-06-04")
    with pytest.raises(ConflictError):
        ReservationService.update_reservation(r.reservation_id, {"vehicle_id": fleet["v2"]})
    moved = ReservationService.update_reservation(
        r.reservation_id, {"vehicle_id": fleet["v2"], "end_date": "2024-06-03"})
    assert moved.vehicle_id == fleet["v2"]


def test_update_refuses_status_and_unknown_fields(fleet):
    r = book(fleet)
    with pytest.raises(ValidationError):
        ReservationService.update_reservation(r.reservation_id, {"status": "confirmed"})
    with pytest.raises(ValidationError):
        ReservationService.update_reservation(r.reservation_id, {"type": "replacement"})


def test_update_terminal_reservation_refused(fleet):
    r = book(fleet)
    ReservationService.cancel(r.reservation_id)
    with pytest.raises(InvalidStateError):
        ReservationService.update_reservation(r.reservation_id, {"notes": "late change"})


# ---------- status ----------
def test_full_happy_path(fleet):
    r = book(fleet)
    for status in ("confirmed", "picked_up", "returned", "completed"):
        r = ReservationService.change_status(r.reservation_id, status)
        assert r.status.value == status


def test_pending_to_picked_up_fails(fleet, store):
    r = book(fleet)
    with pytest.raises(InvalidTransitionError):
        ReservationService.change_status(r.reservation_id, "picked_up")
    assert store.reservations[r.reservation_id]["status"] == "pending"


def test_cannot_cancel_after_pickup(fleet):
    r = book(fleet)
    ReservationService.change_status(r.reservation_id, "confirmed")
    ReservationService.change_status(r.reservation_id, "picked_up")
    with pytest.raises(InvalidTransitionError):
        ReservationService.cancel(r.reservation_id)


def test_cancelling_original_cancels_pending_spare(fleet):
    r = book(fleet)
    spare = SpareService.assign_spare(r.reservation_id, fleet["v2"])
    ReservationService.cancel(r.reservation_id)
    assert ReservationService.get(spare.reservation_id).status.value == "cancelled"


def test_cancelling_original_leaves_picked_up_spare(fleet):
    r = book(fleet)
    ReservationService.change_status(r.reservation_id, "confirmed")
    spare = SpareService.assign_spare(r.reservation_id, fleet["v2"])
    SpareService.advance_spare_status(spare.reservation_id)
    SpareService.advance_spare_status(spare.reservation_id)
    ReservationService.cancel(r.reservation_id)
    assert ReservationService.get(spare.reservation_id).status.value == "picked_up"


# ---------- maintenance ----------
def test_maintenance_block_lifecycle(fleet):
    block = ReservationService.create_maintenance_block(fleet["v1"], "2024-06-01")
    assert block.status.value == "confirmed"
    assert block.customer_id is None
    with pytest.raises(ConflictError):
        book(fleet, start="2024-08-01", end="2024-08-02")

    closed = ReservationService.close_maintenance_block(block.reservation_id, "2024-06-04")
    assert closed.status.value == "completed"
    assert closed.end_date == "2024-06-04"
    assert book(fleet, start="2024-06-05", end="2024-06-06")


def test_close_maintenance_requires_block(fleet):
    r = book(fleet)
    with pytest.raises(InvalidStateError):
        ReservationService.close_maintenance_block(r.reservation_id, "2024-06-05")


# ---------- queries ----------
def test_in_range_includes_any_status(fleet, store):
    put_reservation(store, fleet["v1"], start="2024-06-01", end="2024-06-05", status="cancelled")
    put_reservation(store, fleet["v2"], start="2024-06-05", end="2024-06-09")
    put_reservation(store, fleet["v2"], start="2024-07-01", end="2024-07-02")
    rows = ReservationService.in_range("2024-06-04", "2024-06-06")
    assert [r.start_date for r in rows] == ["2024-06-01", "2024-06-05"]


def test_upcoming_and_overdue(fleet, store, frozen_today):
    put_reservation(store, fleet["v1"], start="2024-06-01", end="2024-06-02", status="picked_up")
    put_reservation(store, fleet["v1"], start="2024-06-10", end="2024-06-12", status="pending")
    put_reservation(store, fleet["v2"], start="2024-06-03", end="2024-06-04", status="confirmed")
    put_reservation(store, fleet["v2"], start="2024-06-20", end="2024-06-21", status="cancelled")

    upcoming = ReservationService.upcoming()
    assert [r.start_date for r in upcoming] == ["2024-06-03", "2024-06-10"]
    assert len(ReservationService.upcoming(limit=1)) == 1

    overdue = ReservationService.overdue()
    assert [r.end_date for r in overdue] == ["2024-06-02"]


def test_by_vehicle_and_customer_newest_first(fleet, store):
    put_reservation(store, fleet["v1"], start="2024-06-01", customer_id=fleet["c1"])
    put_reservation(store, fleet["v1"], start="2024-07-01", end="2024-07-02", customer_id=fleet["c1"])
    assert [r.start_date for r in ReservationService.by_vehicle(fleet["v1"])] == ["2024-07-01", "2024-06-01"]
    assert len(ReservationService.by_customer(fleet["c1"])) == 2


def test_update_refuses_vehicle_off_rental(fleet, store):
    r = book(fleet)
    store.vehicles[fleet["v2"]]["available_for_rental"] = False
    with pytest.raises(InvalidStateError):
        ReservationService.update_reservation(r.reservation_id, {"vehicle_id": fleet["v2"]})
    assert store.reservations[r.reservation_id]["vehicle_id"] == fleet["v1"]


def test_maintenance_block_completes_only_through_close(fleet, store):
    block = ReservationService.create_maintenance_block(fleet["v1"], "2024-06-01")
    with pytest.raises(InvalidStateError):
        ReservationService.change_status(block.reservation_id, "completed")
    row = store.reservations[block.reservation_id]
    assert (row["status"], row["end_date"]) == ("confirmed", None)

    closed = ReservationService.close_maintenance_block(block.reservation_id, "2024-06-02")
    assert closed.status.value == "completed"
    assert book(fleet, start="2030-01-01", end="2030-01-02")


def test_maintenance_block_can_be_cancelled(fleet):
    block = ReservationService.create_maintenance_block(fleet["v1"], "2024-06-01", "2024-06-03")
    assert ReservationService.cancel(block.reservation_id).status.value == "cancelled"
