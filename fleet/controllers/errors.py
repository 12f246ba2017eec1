import logging

from flask import jsonify

from ..exceptions import FleetError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Render every FleetError as JSON with its own status code."""

    @app.errorhandler(FleetError)
    def handle_fleet_error(err: FleetError):
        logger.info("%s: %s", type(err).__name__, err.message)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(404)
    def handle_not_found(_err):
        return jsonify({"error": "NotFound", "message": "Error: no such endpoint"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_err):
        return jsonify({"error": "MethodNotAllowed", "message": "Error: method not allowed"}), 405
