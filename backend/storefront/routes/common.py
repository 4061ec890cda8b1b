# Overview: Request parsing helpers shared by the blueprints.

from flask import current_app, request

from ..errors import ValidationError
from ..validation import parse_pagination


def json_body() -> dict:
    """Parsed JSON object body; missing body counts as {}."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def pagination_args() -> tuple[int, int]:
    return parse_pagination(
        request.args,
        default_limit=current_app.config["DEFAULT_PAGE_SIZE"],
        max_limit=current_app.config["MAX_PAGE_SIZE"],
    )


def wants_pagination() -> bool:
    return "page" in request.args or "limit" in request.args
