"""
Helper Functions

Contains utility functions used throughout the application.
"""

from dataclasses import asdict, is_dataclass
from typing import Any, Dict

from flask import request

from ..errors import ValidationError


def get_json_body(required: bool = True) -> Dict[str, Any]:
    """Returns the request JSON object, or raises ValidationError if it is missing."""
    data = request.get_json(silent=True)
    if data is None:
        if required:
            raise ValidationError("Request body is required")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_field(data: Dict[str, Any], name: str) -> Any:
    """Returns a required field from a request payload."""
    value = data.get(name)
    if value is None or value == "":
        raise ValidationError(f"{name} is required")
    return value


def to_payload(result: Any) -> Dict[str, Any]:
    """Converts a service result dataclass to a JSON-ready dict."""
    payload = asdict(result) if is_dataclass(result) else dict(result)
    for key, value in payload.items():
        if hasattr(value, 'isoformat'):
            payload[key] = value.isoformat()
    return payload
