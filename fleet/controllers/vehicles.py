from flask import Blueprint, jsonify, request

from ..services.availability_service import AvailabilityService
from ..services.reservation_service import ReservationService
from ..services.vehicle_service import VehicleService
from ..utils.payload import json_body, query_arg

bp = Blueprint("vehicles", __name__, url_prefix="/")


@bp.get("/availability")
def availability():
    """
    Ids of vehicles free for the whole [start, end] range, in fleet order.
    Optional `exclude` drops one vehicle (the broken one when picking a spare).
    """
    start = query_arg("start", "startDate", required=True)
    end = query_arg("end", "endDate", required=True)
    vehicles = AvailabilityService.available_vehicles(start, end, exclude_vehicle_id=query_arg("exclude"))
    return jsonify([v.vehicle_id for v in vehicles])


@bp.get("/vehicles")
def list_vehicles():
    """Vehicles list with optional ?brand= and ?available=1 filters."""
    available_only = (request.args.get("available") or "").lower() in ("1", "true", "yes")
    vehicles = VehicleService.filter_vehicles(brand=query_arg("brand"), available_only=available_only)
    return jsonify([v.to_json() for v in vehicles])


@bp.post("/vehicles")
def create_vehicle():
    v = VehicleService.create_vehicle(json_body())
    return jsonify(v.to_json()), 201


@bp.get("/vehicles/<vid>")
def vehicle_detail(vid):
    return jsonify(VehicleService.get_vehicle(vid).to_json())


@bp.patch("/vehicles/<vid>")
def update_vehicle(vid):
    return jsonify(VehicleService.update_vehicle(vid, json_body()).to_json())


@bp.delete("/vehicles/<vid>")
def delete_vehicle(vid):
    VehicleService.delete_vehicle(vid)
    return "", 204


@bp.get("/vehicles/<vid>/calendar")
def vehicle_calendar(vid):
    """Booked ranges used by date pickers to block days."""
    return jsonify([{"start": s, "end": e} for s, e in VehicleService.calendar(vid)])


@bp.get("/vehicles/<vid>/reservations")
def vehicle_reservations(vid):
    return jsonify([r.to_json() for r in ReservationService.by_vehicle(vid)])


@bp.post("/vehicles/<vid>/maintenance-blocks")
def create_maintenance_block(vid):
    data = json_body()
    block = ReservationService.create_maintenance_block(
        vid, data.get("start_date"), data.get("end_date"), notes=data.get("notes"))
    return jsonify(block.to_json()), 201
