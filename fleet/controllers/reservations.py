from flask import Blueprint, jsonify, request

from ..exceptions import ValidationError
from ..services.conflict_service import ConflictService
from ..services.reservation_service import ReservationService
from ..services.spare_service import SpareService
from ..utils.payload import json_body, query_arg

bp = Blueprint("reservations", __name__, url_prefix="/reservations")


def _many(rows):
    return jsonify([r.to_json() for r in rows])


# ---------- collections ----------
@bp.get("")
def list_reservations():
    """All reservations, or those touching ?start=&end= when both are given."""
    start = query_arg("start", "startDate")
    end = query_arg("end", "endDate")
    if start or end:
        if not (start and end):
            raise ValidationError("Error: both start and end are required for a range query")
        return _many(ReservationService.in_range(start, end))
    return _many(ReservationService.all())


@bp.post("")
def create_reservation():
    return jsonify(ReservationService.create_reservation(json_body()).to_json()), 201


@bp.get("/upcoming")
def upcoming():
    limit = request.args.get("limit", type=int)
    return _many(ReservationService.upcoming(limit=limit))


@bp.get("/overdue")
def overdue():
    return _many(ReservationService.overdue())


@bp.get("/conflicts")
def conflicts():
    """Conflicting reservations for ?vehicleId=&start=&end= (empty list = free)."""
    vehicle_id = query_arg("vehicleId", "vehicle_id", required=True)
    start = query_arg("start", "startDate", required=True)
    end = query_arg("end", "endDate")
    exclude = query_arg("exclude", "excludeReservationId")
    return _many(ConflictService.find_conflicts(vehicle_id, start, end, exclude))


@bp.get("/placeholders")
def placeholders():
    """Spare placeholders still waiting for a vehicle."""
    days = request.args.get("days", type=int)
    return _many(SpareService.placeholders_needing_assignment(days_ahead=days))


# ---------- single reservation ----------
@bp.get("/<rid>")
def reservation_detail(rid):
    return jsonify(ReservationService.get(rid).to_json())


@bp.patch("/<rid>")
def update_reservation(rid):
    return jsonify(ReservationService.update_reservation(rid, json_body()).to_json())


@bp.patch("/<rid>/status")
def change_status(rid):
    data = json_body()
    new_status = data.get("new_status") or data.get("status")
    if not new_status:
        raise ValidationError("Error: newStatus is required")
    return jsonify(ReservationService.change_status(rid, new_status).to_json())


@bp.post("/<rid>/close")
def close(rid):
    """Close a maintenance block or a returned spare with its actual end date."""
    data = json_body()
    current = ReservationService.get(rid)
    if current.is_maintenance:
        closed = ReservationService.close_maintenance_block(rid, data.get("end_date"))
    else:
        closed = SpareService.close_replacement(rid, data.get("end_date"))
    return jsonify(closed.to_json())


# ---------- spares ----------
@bp.post("/<rid>/assign-spare")
def assign_spare(rid):
    data = json_body()
    if not data.get("vehicle_id"):
        raise ValidationError("Error: vehicleId is required")
    created = SpareService.assign_spare(rid, data["vehicle_id"], data.get("start_date"), data.get("end_date"))
    return jsonify(created.to_json()), 201


@bp.get("/<rid>/spare")
def active_spare(rid):
    spare = SpareService.active_replacement(rid)
    return jsonify(spare.to_json() if spare else None)


@bp.patch("/<rid>/spare-status")
def spare_status(rid):
    data = json_body()
    new_status = data.get("spare_vehicle_status") or data.get("new_status")
    return jsonify(SpareService.advance_spare_status(rid, new_status).to_json())


@bp.post("/<rid>/placeholder")
def create_placeholder(rid):
    data = json_body()
    created = SpareService.create_placeholder(rid, data.get("start_date"), data.get("end_date"))
    return jsonify(created.to_json()), 201


@bp.post("/<rid>/assign-vehicle")
def assign_vehicle(rid):
    data = json_body()
    if not data.get("vehicle_id"):
        raise ValidationError("Error: vehicleId is required")
    return jsonify(SpareService.assign_vehicle_to_placeholder(rid, data["vehicle_id"], data.get("end_date")).to_json())
