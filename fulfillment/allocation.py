from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Union

from fulfillment.models import (
    FailureKind,
    FulfillmentPlan,
    Order,
    OrderFailure,
    ShipmentAllocation,
    Warehouse,
)
from fulfillment.store import Store

PlanOutcome = Union[FulfillmentPlan, OrderFailure]


def leftover_score(warehouse: Warehouse, items: Mapping[str, int]) -> int:
    return sum(warehouse.available(p) - qty for p, qty in items.items())


class AllocationPlanner:
    """
    Decides where an order ships from. Never touches live inventory: the
    returned plan is applied separately by ReservationCommitter.

    1. Single warehouse that covers every item, smallest leftover score wins
       (ties -> earlier warehouse).
    2. Otherwise a greedy split over a private snapshot, drawing each item from
       the warehouses with the most remaining stock first.
    """

    def __init__(self, store: Store):
        self.store = store

    def plan(self, order: Order) -> PlanOutcome:
        best = self.best_single_warehouse(order.items)
        if best is not None:
            return FulfillmentPlan(order.order_id, [ShipmentAllocation(best.id, dict(order.items))])
        return self.plan_split(order)

    def best_single_warehouse(self, items: Mapping[str, int]) -> Optional[Warehouse]:
        candidates = [w for w in self.store.ordered() if w.can_cover(items)]
        if not candidates:
            return None
        # min() keeps the first of equal scores
        return min(candidates, key=lambda w: leftover_score(w, items))

    def plan_split(self, order: Order) -> PlanOutcome:
        warehouse_ids = [w.id for w in self.store.ordered()]
        snapshot = self.store.snapshot()
        drawn: Dict[str, Dict[str, int]] = {}

        for product_id, qty in order.items.items():
            need = qty
            by_stock = sorted(warehouse_ids, key=lambda wid: snapshot[wid].get(product_id, 0), reverse=True)
            for wid in by_stock:
                have = snapshot[wid].get(product_id, 0)
                if have <= 0:
                    break
                take = min(have, need)
                snapshot[wid][product_id] = have - take
                shipment = drawn.setdefault(wid, {})
                shipment[product_id] = shipment.get(product_id, 0) + take
                need -= take
                if need == 0:
                    break

            if need > 0:
                return OrderFailure(
                    order.order_id,
                    FailureKind.NO_FULFILLMENT_PATH,
                    f"Could not fully allocate '{product_id}' for order {order.order_id}.",
                )

        shipments: List[ShipmentAllocation] = [ShipmentAllocation(wid, items) for wid, items in drawn.items()]
        return FulfillmentPlan(order.order_id, shipments)
