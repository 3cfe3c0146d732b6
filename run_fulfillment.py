from __future__ import annotations

import argparse
import logging
from typing import Dict, List

from fulfillment.catalog import Catalog
from fulfillment.engine import EngineConfig, FulfillmentEngine
from fulfillment.models import FulfillmentResult, Order, ProductCategory
from fulfillment.store import Store


def seed(store: Store, catalog: Catalog) -> Dict[str, str]:
    laptop = catalog.add("Laptop", ProductCategory.TECHNOLOGY)
    mouse = catalog.add("Mouse", ProductCategory.TECHNOLOGY)
    keyboard = catalog.add("Keyboard", ProductCategory.TECHNOLOGY)

    store.add_warehouse("W1", {laptop.product_id: 5, mouse.product_id: 20})
    store.add_warehouse("W2", {laptop.product_id: 2, keyboard.product_id: 10})

    return {"laptop": laptop.product_id, "mouse": mouse.product_id, "keyboard": keyboard.product_id}


def demo_orders(ids: Dict[str, str], with_split: bool) -> List[Order]:
    orders = [
        Order(1001, {ids["laptop"]: 1, ids["mouse"]: 2}),
        Order(1002, {ids["keyboard"]: 1}),
        Order(1003, {ids["laptop"]: 99}),
        Order(1004, {ids["mouse"]: -1}),
    ]
    if with_split:
        orders.append(Order(1005, {ids["laptop"]: 6}))
    return orders


def format_items(items: Dict[str, int], catalog: Catalog) -> str:
    return ", ".join(f"{catalog.name_for(p)} x{qty}" for p, qty in items.items())


def print_result(result: FulfillmentResult, store: Store, catalog: Catalog) -> None:
    print("\n=== Fulfillment Plans ===")
    if not result.plans:
        print("(none)")
    for plan in result.plans:
        print(f"Order {plan.order_id}:")
        for shipment in plan.shipments:
            print(f"  From {shipment.warehouse_id}: {format_items(shipment.items, catalog)}")

    print("\n=== Failures ===")
    if not result.failures:
        print("(none)")
    for failure in result.failures:
        print(f"Order {failure.order_id}: {failure}")

    if result.has_unexpected_errors:
        print(f"\n!!! {len(result.unexpected_errors)} unexpected error(s) in this batch")

    print("\n=== Ending Inventory ===")
    for warehouse in store.ordered():
        print(f"{warehouse.id}:")
        if not warehouse.inventory:
            print("  (empty)")
        for product_id in sorted(warehouse.inventory):
            print(f"  {catalog.name_for(product_id)} ({product_id}): {warehouse.inventory[product_id]}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    p = argparse.ArgumentParser(description="Run the demo order batch through the fulfillment engine.")
    p.add_argument("--workers", type=int, default=None, help="Thread pool size for validation")
    p.add_argument("--with-split", action="store_true", help="Add an order that needs two warehouses")
    p.add_argument(
        "--halt-on-unexpected",
        action="store_true",
        help="Skip allocation for the whole batch if validation hit an unexpected error",
    )
    args = p.parse_args()

    store = Store()
    catalog = Catalog()
    ids = seed(store, catalog)

    print("Catalog IDs:")
    for product in catalog:
        print(f"  {product.name} => {product.product_id}")

    engine = FulfillmentEngine(
        store,
        catalog=catalog,
        config=EngineConfig(max_workers=args.workers, halt_on_unexpected_errors=args.halt_on_unexpected),
    )
    result = engine.process(demo_orders(ids, args.with_split))

    print_result(result, store, catalog)


if __name__ == "__main__":
    main()
