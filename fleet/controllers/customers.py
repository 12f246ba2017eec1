from flask import Blueprint, jsonify

from ..services.customer_service import CustomerService
from ..services.reservation_service import ReservationService
from ..utils.payload import json_body

bp = Blueprint("customers", __name__, url_prefix="/customers")


@bp.get("")
def list_customers():
    return jsonify([c.to_json() for c in CustomerService.all_customers()])


@bp.post("")
def create_customer():
    c = CustomerService.create_customer(json_body())
    return jsonify(c.to_json()), 201


@bp.get("/<cid>")
def customer_detail(cid):
    return jsonify(CustomerService.get_customer(cid).to_json())


@bp.get("/<cid>/reservations")
def customer_reservations(cid):
    return jsonify([r.to_json() for r in ReservationService.by_customer(cid)])
