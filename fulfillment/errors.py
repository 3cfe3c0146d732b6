from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from fulfillment.models import UnexpectedError


class FulfillmentError(Exception):
    pass


class WarehouseDoesNotExistError(FulfillmentError):
    def __init__(self, warehouse_id: str):
        super().__init__(f"Warehouse does not exist: {warehouse_id}")
        self.warehouse_id = warehouse_id


class ReservationError(FulfillmentError):
    def __init__(self, warehouse_id: str, product_id: str, requested: int, available: int):
        super().__init__(
            f"Cannot reserve {product_id} from {warehouse_id}: need={requested}, have={available}"
        )
        self.warehouse_id = warehouse_id
        self.product_id = product_id
        self.requested = requested
        self.available = available


class BatchValidationError(FulfillmentError):
    """Raised on demand when a batch captured one or more unexpected errors."""

    def __init__(self, errors: List[UnexpectedError]):
        super().__init__(f"{len(errors)} unexpected error(s) occurred while processing the batch")
        self.errors = errors
