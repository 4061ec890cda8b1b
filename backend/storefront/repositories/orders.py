# backend/storefront/repositories/orders.py
"""
Order and order-item statements.

Each method issues one statement (or one batch) against the store. The
order workflow decides how those statements are grouped and what happens
when one of them fails.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..models import Order, OrderItem
from .base import Repository, paginate, storable_id


@dataclass(frozen=True)
class ItemDraft:
    product_id: int
    quantity: int
    price: Decimal


class OrderRepository(Repository):

    def list(
        self,
        page: int | None = None,
        limit: int | None = None,
        user_id: str | None = None,
    ) -> tuple[list[Order], int]:
        query = self.session.query(Order)
        if user_id is not None:
            query = query.filter(Order.user_id == user_id)
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        return paginate(query, page, limit)

    def get_by_id(self, order_id: int) -> Order | None:
        if not storable_id(order_id):
            return None
        return self.session.get(Order, order_id)

    def get_items(self, order_id: int) -> list[OrderItem]:
        return (
            self.session.query(OrderItem)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.id.asc())
            .all()
        )

    def insert(self, *, user_id: str, status: str, total_amount: Decimal, commit: bool = True) -> Order:
        order = Order(user_id=user_id, status=status, total_amount=total_amount)
        self.session.add(order)
        self._finish(commit)
        return order

    def insert_items(self, order_id: int, items: list[ItemDraft], *, commit: bool = True) -> list[OrderItem]:
        rows = [
            OrderItem(
                order_id=order_id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in items
        ]
        self.session.add_all(rows)
        self._finish(commit)
        return rows

    def update(self, order_id: int, fields: dict, *, commit: bool = True) -> Order | None:
        order = self.get_by_id(order_id)
        if order is None:
            return None
        for k, v in fields.items():
            setattr(order, k, v)
        self._finish(commit)
        return order

    def delete_items(self, order_id: int, *, commit: bool = True) -> int:
        deleted = (
            self.session.query(OrderItem)
            .filter(OrderItem.order_id == order_id)
            .delete(synchronize_session="fetch")
        )
        self._finish(commit)
        return deleted

    def delete(self, order_id: int, *, commit: bool = True) -> int:
        deleted = (
            self.session.query(Order)
            .filter(Order.id == order_id)
            .delete(synchronize_session="fetch")
        )
        self._finish(commit)
        return deleted
