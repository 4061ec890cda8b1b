# backend/storefront/repositories/products.py
"""
Product repository.

Field whitelisting and range checks live here so every write path
(HTTP, CLI seeding, tests) goes through the same rules.
"""
from __future__ import annotations

from typing import Iterable

from sqlalchemy import or_

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Category, OrderItem, Product
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from .base import Repository, like_pattern, paginate, storable_id

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description", "price", "stock", "image_url", "category_id"}),
    required_on_create=frozenset({"name", "price"}),
    defaults={"stock": 0, "description": None, "image_url": None, "category_id": None},
)


class ProductRepository(Repository):

    def list(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        category_id: int | None = None,
    ) -> tuple[list[Product], int]:
        """
        Newest-first product listing.

        search matches name OR description, case-insensitively.
        """
        query = self.session.query(Product)
        if search:
            pattern = like_pattern(search)
            query = query.filter(or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
            ))
        if category_id is not None:
            if not storable_id(category_id):
                return [], 0
            query = query.filter(Product.category_id == category_id)

        query = query.order_by(Product.created_at.desc(), Product.id.desc())
        return paginate(query, page, limit)

    def list_by_category(self, category_id: int) -> list[Product]:
        rows, _ = self.list(category_id=category_id)
        return rows

    def get_by_id(self, product_id: int) -> Product | None:
        if not storable_id(product_id):
            return None
        return self.session.get(Product, product_id)

    def find_missing_ids(self, product_ids: Iterable[int]) -> set[int]:
        wanted = set(product_ids)
        lookup = {pid for pid in wanted if storable_id(pid)}
        if not lookup:
            return wanted
        found = {
            row.id
            for row in self.session.query(Product.id).filter(Product.id.in_(lookup))
        }
        return wanted - found

    def _check_category(self, patch: dict) -> None:
        category_id = patch.get("category_id")
        if category_id is None:
            return
        exists = storable_id(category_id) and (
            self.session.query(Category.id).filter(Category.id == category_id).first()
        )
        if not exists:
            raise ValidationError(
                "Validation failed",
                details=[{"field": "category_id", "message": "Category not found"}],
            )

    def create(self, payload: dict, *, commit: bool = True) -> Product:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        self._check_category(patch)

        product = Product(**patch)
        self.session.add(product)
        self._finish(commit)
        return product

    def update(self, product_id: int, payload: dict, *, commit: bool = True) -> Product:
        product = self.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        if not patch:
            raise ValidationError("Nothing to update")
        enforce_rules_product(patch)
        self._check_category(patch)

        for k, v in patch.items():
            setattr(product, k, v)
        self._finish(commit)
        return product

    def delete(self, product_id: int, *, commit: bool = True) -> None:
        if self.get_by_id(product_id) is None:
            raise NotFoundError("Product not found")

        referenced = (
            self.session.query(OrderItem.id)
            .filter(OrderItem.product_id == product_id)
            .limit(1)
            .first()
        )
        if referenced is not None:
            raise ConflictError("Cannot delete product referenced by existing orders")

        self.session.query(Product).filter(Product.id == product_id).delete(synchronize_session="fetch")
        self._finish(commit)
