# backend/storefront/repositories/categories.py
from __future__ import annotations

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Category, Product
from ..validation import ModelValidationPolicy, validate_payload
from .base import Repository, paginate, storable_id

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "description"}),
    required_on_create=frozenset({"name"}),
    defaults={"description": None},
)


class CategoryRepository(Repository):

    def list(self, page: int | None = None, limit: int | None = None) -> tuple[list[Category], int]:
        query = self.session.query(Category).order_by(Category.created_at.desc(), Category.id.desc())
        return paginate(query, page, limit)

    def get_by_id(self, category_id: int) -> Category | None:
        if not storable_id(category_id):
            return None
        return self.session.get(Category, category_id)

    def exists(self, category_id: int) -> bool:
        if not storable_id(category_id):
            return False
        return self.session.query(Category.id).filter(Category.id == category_id).first() is not None

    def _ensure_name_free(self, name: str, exclude_id: int | None = None) -> None:
        query = self.session.query(Category.id).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            raise ConflictError("Category with this name already exists")

    def create(self, payload: dict, *, commit: bool = True) -> Category:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        self._ensure_name_free(patch["name"])

        category = Category(**patch)
        self.session.add(category)
        self._finish(commit)
        return category

    def update(self, category_id: int, payload: dict, *, commit: bool = True) -> Category:
        category = self.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")

        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
        if not patch:
            raise ValidationError("Nothing to update")
        if "name" in patch and patch["name"] != category.name:
            self._ensure_name_free(patch["name"], exclude_id=category.id)

        for k, v in patch.items():
            setattr(category, k, v)
        self._finish(commit)
        return category

    def delete(self, category_id: int, *, commit: bool = True) -> None:
        """
        Delete a category that no product references.

        The reference check runs before the DELETE so callers get a specific
        conflict instead of relying on whatever the store does with the
        foreign key.
        """
        if not self.exists(category_id):
            raise NotFoundError("Category not found")

        in_use = (
            self.session.query(Product.id)
            .filter(Product.category_id == category_id)
            .limit(1)
            .first()
        )
        if in_use is not None:
            raise ConflictError("Cannot delete category with existing products")

        self.session.query(Category).filter(Category.id == category_id).delete(synchronize_session="fetch")
        self._finish(commit)
