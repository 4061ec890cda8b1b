# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/storefront/routes/orders.py
"""
Order routes.

All routes require authentication.
- GET /all, PUT, DELETE: admin only
- GET /, POST: the caller's own orders
- GET /<id>: the order's owner, or an admin
"""

from flask import Blueprint, g

from ..decorators import require_auth, require_roles
from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..extensions import get_container
from ..permissions import ADMIN_ONLY, can_access
from ..responses import paginated_response, success_response
from .common import json_body, pagination_args


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("/all")
@require_auth
@require_roles(ADMIN_ONLY)
def list_all_orders_route():
    page, limit = pagination_args()
    orders, total = get_container().order_workflow.list(page, limit)
    return paginated_response([o.to_dict() for o in orders], page, limit, total, "Orders retrieved successfully")


@orders_bp.get("")
@require_auth
def list_my_orders_route():
    page, limit = pagination_args()
    orders, total = get_container().order_workflow.list(page, limit, user_id=g.principal.id)
    return paginated_response([o.to_dict() for o in orders], page, limit, total, "Orders retrieved successfully")


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    order = get_container().order_workflow.find_by_id(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if not can_access(g.principal, order.owner_id):
        raise PermissionDeniedError("Access denied: You can only access your own orders")
    return success_response("Order retrieved successfully", {"order": order.to_dict()})


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Create an order for the calling user.

    Body:
    - items: [{product_id, quantity, price}] (required, non-empty)
    - status: optional, defaults to "pending"
    """
    data = json_body()
    order = get_container().order_workflow.create(g.principal.id, data.get("items"), data.get("status"))
    return success_response("Order created successfully", {"order": order.to_dict()}, 201)


@orders_bp.put("/<int:order_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def update_order_route(order_id: int):
    """Update order status (any status, from any status)."""
    data = json_body()
    if not data.get("status"):
        raise ValidationError("Status is required")
    order = get_container().order_workflow.update(order_id, {"status": data["status"]})
    return success_response("Order updated successfully", {"order": order.to_dict()})


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def delete_order_route(order_id: int):
    get_container().order_workflow.delete(order_id)
    return success_response("Order deleted successfully")
