"""Request body helpers for the JSON controllers."""
import re

from flask import request

from fleet.exceptions import ValidationError

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake(key: str) -> str:
    """'vehicleId' -> 'vehicle_id'; snake_case keys pass through."""
    return _CAMEL.sub("_", key).lower()


def json_body() -> dict:
    """
    Parse the request body as a JSON object with snake_case keys.
    Raises ValidationError for a body that is not a JSON object.
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Error: request body must be a JSON object")
    return {snake(k): v for k, v in data.items()}


def query_arg(name: str, *aliases: str, required: bool = False):
    """First non-empty query parameter among name and its aliases."""
    for key in (name, *aliases):
        value = (request.args.get(key) or "").strip()
        if value:
            return value
    if required:
        raise ValidationError(f"Error: missing query parameter '{name}'")
    return None
