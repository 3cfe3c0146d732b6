from __future__ import annotations

import logging
import threading
from typing import Dict, List, Mapping, Optional

from fulfillment.errors import WarehouseDoesNotExistError
from fulfillment.models import Warehouse

logger = logging.getLogger(__name__)


class Store:
    """
    In-memory warehouse registry.

    Holds:
    - warehouses in insertion order (the order is the tie-break for allocation)
    - an audit log of everything the engine did, mirrored to `logging`

    Phase 1 reads inventory from worker threads, so log appends and
    reservations go through locks.
    """

    def __init__(self) -> None:
        self.warehouses: Dict[str, Warehouse] = {}
        self.logs: List[str] = []

        self._log_lock = threading.Lock()
        self.reservation_lock = threading.Lock()

    def log(self, message: str) -> None:
        with self._log_lock:
            self.logs.append(message)
        logger.info(message)

    def get(self, warehouse_id: str) -> Warehouse:
        warehouse = self.warehouses.get(warehouse_id)
        if warehouse is None:
            raise WarehouseDoesNotExistError(warehouse_id)
        return warehouse

    def ordered(self) -> List[Warehouse]:
        return list(self.warehouses.values())

    def total_available(self, product_id: str) -> int:
        return sum(w.available(product_id) for w in self.warehouses.values())

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {w.id: dict(w.inventory) for w in self.warehouses.values()}

    # Seed helpers (used by tests and the demo CLI)
    def add_warehouse(self, warehouse_id: str, inventory: Optional[Mapping[str, int]] = None) -> Warehouse:
        if warehouse_id in self.warehouses:
            raise ValueError(f"Warehouse {warehouse_id} already exists")
        warehouse = Warehouse(id=warehouse_id)
        self.warehouses[warehouse_id] = warehouse
        for product_id, qty in (inventory or {}).items():
            self.stock(warehouse_id, product_id, qty)
        return warehouse

    def register(self, warehouse: Warehouse) -> Warehouse:
        """Adopt an existing warehouse object; its inventory becomes live state."""
        if warehouse.id in self.warehouses:
            raise ValueError(f"Warehouse {warehouse.id} already exists")
        for product_id, qty in warehouse.inventory.items():
            if qty < 0:
                raise ValueError(f"Warehouse {warehouse.id} has negative qty for {product_id}: {qty}")
        self.warehouses[warehouse.id] = warehouse
        return warehouse

    def stock(self, warehouse_id: str, product_id: str, qty: int) -> None:
        if qty < 0:
            raise ValueError(f"Cannot stock negative qty for {product_id}: {qty}")
        warehouse = self.get(warehouse_id)
        warehouse.inventory[product_id] = warehouse.available(product_id) + qty
