# Overview: Flask API routes for categories; parses input and returns JSON responses.

# backend/storefront/routes/categories.py
"""
Category routes.

Reads are public. Writes require an admin token.
"""

from flask import Blueprint

from ..decorators import require_auth, require_roles
from ..errors import NotFoundError
from ..extensions import get_container
from ..permissions import ADMIN_ONLY
from ..responses import paginated_response, success_response
from .common import json_body, pagination_args, wants_pagination


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
def list_categories_route():
    """
    List categories, newest first.

    Query params:
    - page, limit: optional. Without them every category is returned.
    """
    categories = get_container().categories
    if wants_pagination():
        page, limit = pagination_args()
        rows, total = categories.list(page=page, limit=limit)
        return paginated_response([c.to_dict() for c in rows], page, limit, total, "Categories retrieved successfully")

    rows, _ = categories.list()
    return success_response("Categories retrieved successfully", {"categories": [c.to_dict() for c in rows]})


@categories_bp.get("/<int:category_id>")
def get_category_route(category_id: int):
    category = get_container().categories.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return success_response("Category retrieved successfully", {"category": category.to_dict()})


@categories_bp.get("/<int:category_id>/products")
def list_category_products_route(category_id: int):
    container = get_container()
    category = container.categories.get_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    products = container.products.list_by_category(category_id)
    return success_response("Products retrieved successfully", {
        "category": category.to_dict(),
        "products": [p.to_dict() for p in products],
    })


@categories_bp.post("")
@require_auth
@require_roles(ADMIN_ONLY)
def create_category_route():
    category = get_container().categories.create(json_body())
    return success_response("Category created successfully", {"category": category.to_dict()}, 201)


@categories_bp.put("/<int:category_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def update_category_route(category_id: int):
    category = get_container().categories.update(category_id, json_body())
    return success_response("Category updated successfully", {"category": category.to_dict()})


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_roles(ADMIN_ONLY)
def delete_category_route(category_id: int):
    """Returns 409 while any product still references the category."""
    get_container().categories.delete(category_id)
    return success_response("Category deleted successfully")
