from __future__ import annotations

from collections import Counter
from typing import Dict, Mapping

from fulfillment.errors import ReservationError
from fulfillment.models import FulfillmentPlan, ShipmentAllocation
from fulfillment.store import Store


class ReservationCommitter:
    """The only code path that writes warehouse inventory."""

    def __init__(self, store: Store):
        self.store = store

    def reserve(self, order_id: int, warehouse_id: str, items: Mapping[str, int]) -> None:
        """Single-warehouse form of `commit`."""
        self.commit(FulfillmentPlan(order_id, [ShipmentAllocation(warehouse_id, dict(items))]))

    def commit(self, plan: FulfillmentPlan) -> None:
        # Shipments to the same warehouse are summed; the totals are checked before anything is applied.
        totals = _totals_per_warehouse(plan)
        with self.store.reservation_lock:
            for warehouse_id, items in totals.items():
                self._check(warehouse_id, items)
            for warehouse_id, items in totals.items():
                self._apply(warehouse_id, items)

        for shipment in plan.shipments:
            self.store.log(f"[order={plan.order_id}] reserved from {shipment.warehouse_id}: {_fmt(shipment.items)}")

    def _check(self, warehouse_id: str, items: Mapping[str, int]) -> None:
        warehouse = self.store.get(warehouse_id)
        for product_id, qty in items.items():
            have = warehouse.available(product_id)
            if have < qty:
                raise ReservationError(warehouse_id, product_id, qty, have)

    def _apply(self, warehouse_id: str, items: Mapping[str, int]) -> None:
        warehouse = self.store.get(warehouse_id)
        for product_id, qty in items.items():
            warehouse.inventory[product_id] = warehouse.available(product_id) - qty


def _totals_per_warehouse(plan: FulfillmentPlan) -> Dict[str, Counter]:
    totals: Dict[str, Counter] = {}
    for shipment in plan.shipments:
        bucket = totals.setdefault(shipment.warehouse_id, Counter())
        for product_id, qty in shipment.items.items():
            bucket[product_id] += qty
    return totals


def _fmt(items: Mapping[str, int]) -> str:
    return ", ".join(f"{p} qty={qty}" for p, qty in items.items())
