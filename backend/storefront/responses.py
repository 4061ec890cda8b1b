# Overview: Standard JSON response envelope used by every endpoint.

from __future__ import annotations

import math

from flask import jsonify

from .time_utils import timestamp_now


def success_response(message: str = "Success", data=None, status: int = 200):
    body = {
        "success": True,
        "status": status,
        "message": message,
        "timestamp": timestamp_now(),
    }
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def error_response(status: int = 500, message: str = "Internal Server Error", errors=None):
    body = {
        "success": False,
        "status": status,
        "message": message,
        "timestamp": timestamp_now(),
    }
    if errors is not None:
        body["errors"] = errors if isinstance(errors, list) else [errors]
    return jsonify(body), status


def build_pagination(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def paginated_response(items: list, page: int, limit: int, total: int, message: str = "Success"):
    return success_response(message, {
        "items": items,
        "pagination": build_pagination(page, limit, total),
    })
