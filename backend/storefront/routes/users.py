# Overview: Flask API routes for user management; parses input and returns JSON responses.

# backend/storefront/routes/users.py
"""
User management routes.

All routes require authentication.
- search / get by id: any authenticated user
- list: manager or admin
- update / deactivate: admin only
"""

from flask import Blueprint, request, g

from ..decorators import require_auth, require_roles
from ..errors import NotFoundError
from ..extensions import get_container
from ..permissions import ADMIN_ONLY, MANAGER_OR_ADMIN
from ..responses import paginated_response, success_response
from ..services import user_service
from .common import json_body, pagination_args


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("/search")
@require_auth
def search_users_route():
    """
    Search users by name or email.

    Query params:
    - q: str (required, at least 2 characters)
    - page, limit: pagination
    """
    page, limit = pagination_args()
    users, total = user_service.search_users(get_container().users, request.args.get("q"), page, limit)
    return paginated_response([u.to_dict() for u in users], page, limit, total, "Search completed successfully")


@users_bp.get("")
@require_auth
@require_roles(MANAGER_OR_ADMIN)
def list_users_route():
    page, limit = pagination_args()
    users, total = get_container().users.list(page=page, limit=limit)
    return paginated_response([u.to_dict() for u in users], page, limit, total, "Users retrieved successfully")


@users_bp.get("/<user_id>")
@require_auth
def get_user_route(user_id: str):
    user = get_container().users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return success_response("User retrieved successfully", {"user": user.to_dict()})


@users_bp.put("/<user_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def update_user_route(user_id: str):
    """Admin edit: name, phone, role, department, position, is_active."""
    user = user_service.admin_update_user(get_container().users, g.principal, user_id, json_body())
    return success_response("User updated successfully", {"user": user.to_dict()})


@users_bp.delete("/<user_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def deactivate_user_route(user_id: str):
    """Deactivate (soft-delete) a user. Admins cannot deactivate themselves."""
    user_service.deactivate_user(get_container().users, g.principal, user_id)
    return success_response("User deactivated successfully")
