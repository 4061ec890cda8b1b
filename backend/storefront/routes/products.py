# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""
Product routes.

Reads are public. Writes require an admin token.
"""
from flask import Blueprint, request

from ..decorators import require_auth, require_roles
from ..errors import NotFoundError
from ..extensions import get_container
from ..permissions import ADMIN_ONLY
from ..responses import paginated_response, success_response
from ..validation import coerce_int
from .common import json_body, pagination_args

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """
    List products, newest first.

    Query params:
    - page: int (default 1)
    - limit: int (default 10, max 100)
    - search: str (optional) - case-insensitive match on name or description
    - category_id: int (optional)
    """
    page, limit = pagination_args()
    search = (request.args.get("search") or "").strip() or None
    category_id = request.args.get("category_id")
    if category_id is not None:
        category_id = coerce_int("category_id", category_id)

    rows, total = get_container().products.list(
        page=page, limit=limit, search=search, category_id=category_id
    )
    return paginated_response([p.to_dict() for p in rows], page, limit, total, "Products retrieved successfully")


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = get_container().products.get_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return success_response("Product retrieved successfully", {"product": product.to_dict()})


@products_bp.post("")
@require_auth
@require_roles(ADMIN_ONLY)
def create_product_route():
    """Create a product. name and price are required; stock defaults to 0."""
    product = get_container().products.create(json_body())
    return success_response("Product created successfully", {"product": product.to_dict()}, 201)


@products_bp.put("/<int:product_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def update_product_route(product_id: int):
    product = get_container().products.update(product_id, json_body())
    return success_response("Product updated successfully", {"product": product.to_dict()})


@products_bp.delete("/<int:product_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def delete_product_route(product_id: int):
    """Returns 409 while any order item still references the product."""
    get_container().products.delete(product_id)
    return success_response("Product deleted successfully")
