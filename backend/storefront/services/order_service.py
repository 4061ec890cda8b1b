# Overview: Order workflow; prices, creates and tears down multi-row orders.

"""
Order Workflow

An order is one row in `orders` plus one or more rows in `order_items`.
Creating or deleting it therefore takes two write statements, and the store
is only assumed to make each statement atomic on its own.

How the two statements are grouped is an explicit strategy:

- CompensatingOrderWrites (default): each statement commits on its own. If
  the item insert fails after the order row was committed, the order row is
  deleted again before the failure is surfaced (saga-style compensation).
  If that compensating delete fails too, both failures are reported and the
  orphaned order id is included.

- TransactionalOrderWrites: both statements run in one database
  transaction and are rolled back together. Use it when the configured
  store supports multi-statement transactions.

Item prices are taken from the request as snapshots; they are not looked up
from the product catalog and do not follow later price changes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import NoReturn

from ..errors import NotFoundError, OrderWriteError, ValidationError
from ..models import ORDER_STATUSES, Order, OrderItem
from ..money import MAX_AMOUNT, parse_amount, quantize
from ..repositories.orders import ItemDraft, OrderRepository
from ..repositories.products import ProductRepository
from ..validation import MAX_INTEGER, coerce_int

DEFAULT_STATUS = "pending"
UPDATABLE_FIELDS = ("status", "total_amount")


@dataclass
class OrderWithItems:
    order: Order
    items: list[OrderItem]

    @property
    def owner_id(self) -> str:
        return self.order.user_id

    def to_dict(self) -> dict:
        data = self.order.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data


def compute_total(items: list[ItemDraft]) -> Decimal:
    """Sum of price x quantity in exact decimal arithmetic, rounded to cents once."""
    return quantize(sum((item.price * item.quantity for item in items), Decimal("0")))


def parse_items(items) -> list[ItemDraft]:
    """
    Validate every submitted item before anything is written.

    Each item needs product_id (positive integer), quantity (positive
    integer) and price (non-negative number). All problems are reported
    together, keyed by item position.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Order must have at least one item")

    problems: list[dict] = []
    drafts: list[ItemDraft] = []

    for index, raw in enumerate(items):
        prefix = f"items[{index}]"
        if not isinstance(raw, dict):
            problems.append({"field": prefix, "message": "Each item must have product_id, quantity, and price"})
            continue

        missing = [k for k in ("product_id", "quantity", "price") if raw.get(k) is None]
        if missing:
            for k in missing:
                problems.append({"field": f"{prefix}.{k}", "message": f"{k} is required"})
            continue

        item_problems = len(problems)

        try:
            product_id = coerce_int("product_id", raw["product_id"])
            if product_id < 1 or product_id > MAX_INTEGER:
                problems.append({"field": f"{prefix}.product_id", "message": "Invalid product_id value"})
        except ValidationError:
            problems.append({"field": f"{prefix}.product_id", "message": "Invalid product_id value"})

        try:
            quantity = coerce_int("quantity", raw["quantity"])
            if quantity < 1 or quantity > MAX_INTEGER:
                problems.append({"field": f"{prefix}.quantity", "message": "Invalid quantity value"})
        except ValidationError:
            problems.append({"field": f"{prefix}.quantity", "message": "Invalid quantity value"})

        try:
            price = quantize(parse_amount(raw["price"]))
            if price < 0 or price > MAX_AMOUNT:
                problems.append({"field": f"{prefix}.price", "message": "Invalid price value"})
        except ValueError:
            problems.append({"field": f"{prefix}.price", "message": "Invalid price value"})

        if len(problems) == item_problems:
            drafts.append(ItemDraft(product_id=product_id, quantity=quantity, price=price))

    if problems:
        raise ValidationError("Validation failed", details=problems)
    return drafts


def parse_status(status) -> str:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}")
    return status


class CompensatingOrderWrites:
    """One commit per statement; undo the order row if its items fail."""
    name = "compensating"

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def create(self, orders: OrderRepository, *, user_id: str, status: str,
               total: Decimal, items: list[ItemDraft]) -> OrderWithItems:
        order = orders.insert(user_id=user_id, status=status, total_amount=total)
        order_id = order.id
        try:
            rows = orders.insert_items(order_id, items)
        except Exception as exc:
            self._compensate(orders, order_id, exc)
            raise
        return OrderWithItems(order=order, items=rows)

    def _compensate(self, orders: OrderRepository, order_id: int, cause: Exception) -> NoReturn:
        self.logger.warning(
            "Order %s: item insert failed (%s); deleting order row", order_id, type(cause).__name__
        )
        try:
            orders.delete(order_id)
        except Exception as compensation_exc:
            self.logger.error(
                "Order %s: compensating delete failed (%s); order row is orphaned",
                order_id, type(compensation_exc).__name__,
            )
            raise OrderWriteError(
                "Failed to create order items, and the partially created order could not be removed",
                details={
                    "step": "insert_items",
                    "error": type(cause).__name__,
                    "compensation": "failed",
                    "compensation_error": type(compensation_exc).__name__,
                    "orphaned_order_id": order_id,
                },
                compensation_error=compensation_exc,
            ) from cause

        raise OrderWriteError(
            "Failed to create order items; the order was not created",
            details={
                "step": "insert_items",
                "error": type(cause).__name__,
                "compensation": "succeeded",
                "removed_order_id": order_id,
            },
        ) from cause

    def delete(self, orders: OrderRepository, order_id: int) -> None:
        orders.delete_items(order_id)
        try:
            orders.delete(order_id)
        except Exception as exc:
            # Items are already gone; the order row stays with zero items.
            self.logger.error("Order %s: items deleted but order row delete failed", order_id)
            raise OrderWriteError(
                "Failed to delete order; its items were already removed",
                details={"step": "delete_order", "error": type(exc).__name__, "order_id": order_id},
            ) from exc


class TransactionalOrderWrites:
    """Both statements in one database transaction."""
    name = "transactional"

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def create(self, orders: OrderRepository, *, user_id: str, status: str,
               total: Decimal, items: list[ItemDraft]) -> OrderWithItems:
        try:
            order = orders.insert(user_id=user_id, status=status, total_amount=total, commit=False)
            rows = orders.insert_items(order.id, items, commit=False)
            orders.session.commit()
        except Exception as exc:
            orders.session.rollback()
            self.logger.warning("Order create rolled back (%s)", type(exc).__name__)
            raise OrderWriteError(
                "Failed to create order; nothing was written",
                details={"step": "transaction", "error": type(exc).__name__, "compensation": "rolled_back"},
            ) from exc
        return OrderWithItems(order=order, items=rows)

    def delete(self, orders: OrderRepository, order_id: int) -> None:
        try:
            orders.delete_items(order_id, commit=False)
            orders.delete(order_id, commit=False)
            orders.session.commit()
        except Exception as exc:
            orders.session.rollback()
            raise OrderWriteError(
                "Failed to delete order; nothing was removed",
                details={"step": "transaction", "error": type(exc).__name__, "order_id": order_id},
            ) from exc


WRITE_STRATEGIES = {
    CompensatingOrderWrites.name: CompensatingOrderWrites,
    TransactionalOrderWrites.name: TransactionalOrderWrites,
}


def make_write_strategy(name: str, logger: logging.Logger):
    try:
        return WRITE_STRATEGIES[name](logger)
    except KeyError:
        raise ValueError(
            f"Unknown ORDER_WRITE_STRATEGY {name!r}; expected one of {sorted(WRITE_STRATEGIES)}"
        )


class OrderWorkflow:

    def __init__(self, *, orders: OrderRepository, products: ProductRepository, writes):
        self.orders = orders
        self.products = products
        self.writes = writes

    def create(self, owner_id: str, items, status: str | None = None) -> OrderWithItems:
        """
        Validate, price and persist an order with its items.

        All validation (including that every product exists) happens before
        the first write.
        """
        if not owner_id:
            raise ValidationError("User ID is required")
        drafts = parse_items(items)
        status = DEFAULT_STATUS if status is None else parse_status(status)

        missing = self.products.find_missing_ids(d.product_id for d in drafts)
        if missing:
            raise ValidationError(
                "Validation failed",
                details=[
                    {"field": "product_id", "message": f"Product {pid} not found"}
                    for pid in sorted(missing)
                ],
            )

        total = compute_total(drafts)
        if total > MAX_AMOUNT:
            raise ValidationError(f"Order total cannot exceed {MAX_AMOUNT}")

        return self.writes.create(self.orders, user_id=owner_id, status=status, total=total, items=drafts)

    def find_by_id(self, order_id: int) -> OrderWithItems | None:
        order = self.orders.get_by_id(order_id)
        if order is None:
            return None
        return OrderWithItems(order=order, items=self.orders.get_items(order.id))

    def list(self, page: int, limit: int, user_id: str | None = None) -> tuple[list[Order], int]:
        """user_id=None lists every order (admin view)."""
        return self.orders.list(page=page, limit=limit, user_id=user_id)

    def update(self, order_id: int, fields: dict) -> OrderWithItems:
        """
        Free-form update of status and/or total_amount.

        Any status in ORDER_STATUSES is accepted from any prior status.
        """
        if self.orders.get_by_id(order_id) is None:
            raise NotFoundError("Order not found")
        if not isinstance(fields, dict):
            raise ValidationError("Invalid JSON payload")

        unknown = sorted(set(fields) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Field not allowed: {', '.join(unknown)}")

        patch: dict = {}
        if fields.get("status") is not None:
            patch["status"] = parse_status(fields["status"])
        if fields.get("total_amount") is not None:
            try:
                total = quantize(parse_amount(fields["total_amount"]))
            except ValueError:
                raise ValidationError("total_amount must be a number")
            if total < 0 or total > MAX_AMOUNT:
                raise ValidationError("total_amount must be between 0 and " + str(MAX_AMOUNT))
            patch["total_amount"] = total
        if not patch:
            raise ValidationError("Nothing to update")

        order = self.orders.update(order_id, patch)
        if order is None:
            # Deleted between the existence check and the write
            raise NotFoundError("Order not found")
        return OrderWithItems(order=order, items=self.orders.get_items(order.id))

    def delete(self, order_id: int) -> None:
        """Delete items first, then the order row."""
        if self.orders.get_by_id(order_id) is None:
            raise NotFoundError("Order not found")
        self.writes.delete(self.orders, order_id)
