from __future__ import annotations

from typing import Optional

from fulfillment.catalog import Catalog
from fulfillment.models import FailureKind, Order, OrderFailure
from fulfillment.store import Store

MISSING_ORDER_ID = -1


class OrderValidator:
    """Structural checks only. Returns None when the order is well-formed."""

    def validate(self, order: Optional[Order]) -> Optional[OrderFailure]:
        if order is None:
            return _invalid(MISSING_ORDER_ID, "Order is missing.")

        if not _is_order_id(order.order_id):
            return _invalid(order.order_id, f"Order has invalid id: {order.order_id!r}")

        if not order.items:
            return _invalid(order.order_id, f"Order {order.order_id} has no items.")

        for product_id, qty in order.items.items():
            if not isinstance(product_id, str) or not product_id.strip():
                return _invalid(order.order_id, f"Order {order.order_id} has a blank product key.")
            if not _is_positive_int(qty):
                return _invalid(order.order_id, f"Order {order.order_id} has invalid qty for '{product_id}': {qty}")

        return None


class FeasibilityChecker:
    """
    Read-only check that total stock across all warehouses can cover each item.

    Must run while inventory is frozen; the engine guarantees no reservation
    happens until every check in the batch has finished.
    """

    def __init__(self, store: Store, catalog: Optional[Catalog] = None):
        self.store = store
        self.catalog = catalog

    def check(self, order: Order) -> Optional[OrderFailure]:
        for product_id, qty in order.items.items():
            if self.catalog is not None and product_id not in self.catalog:
                return OrderFailure(
                    order.order_id,
                    FailureKind.UNKNOWN_PRODUCT,
                    f"Order {order.order_id}: unknown product '{product_id}'.",
                )

            if all(w.available(product_id) <= 0 for w in self.store.ordered()):
                return OrderFailure(
                    order.order_id,
                    FailureKind.NO_FULFILLMENT_PATH,
                    f"Product '{product_id}' is not stocked in any warehouse.",
                )

            total = self.store.total_available(product_id)
            if total < qty:
                return OrderFailure(
                    order.order_id,
                    FailureKind.OUT_OF_STOCK,
                    f"Out of stock: '{product_id}'. Need {qty}, have {total} total.",
                )

        return None


def _invalid(order_id: int, reason: str) -> OrderFailure:
    return OrderFailure(order_id, FailureKind.INVALID_ORDER, reason)


def _is_order_id(order_id: object) -> bool:
    return isinstance(order_id, int) and not isinstance(order_id, bool)


def _is_positive_int(qty: object) -> bool:
    return isinstance(qty, int) and not isinstance(qty, bool) and qty > 0
