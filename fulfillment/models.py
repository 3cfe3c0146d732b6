from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional

from fulfillment.errors import BatchValidationError


class ProductCategory(Enum):
    TECHNOLOGY = "T"
    BEAUTY = "B"
    HOME_APPLIANCE = "H"
    UNCATEGORIZED = "U"

    @property
    def prefix(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Product:
    product_id: str
    name: str
    category: ProductCategory


@dataclass(slots=True)
class Warehouse:
    """
    Stock location: product_id -> available quantity.

    Only the reservation committer decrements `inventory`; everything else reads
    it through `available()`.
    """

    id: str
    inventory: Dict[str, int] = field(default_factory=dict)

    def available(self, product_id: str) -> int:
        return self.inventory.get(product_id, 0)

    def can_cover(self, items: Mapping[str, int]) -> bool:
        return all(self.available(p) >= qty for p, qty in items.items())


@dataclass(frozen=True, slots=True)
class Order:
    order_id: int
    items: Mapping[str, int]


class FailureKind(Enum):
    INVALID_ORDER = "invalid_order"
    UNKNOWN_PRODUCT = "unknown_product"
    NO_FULFILLMENT_PATH = "no_fulfillment_path"
    OUT_OF_STOCK = "out_of_stock"
    WAREHOUSE_DOES_NOT_EXIST = "warehouse_does_not_exist"
    UNEXPECTED_ERROR = "unexpected_error"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ShipmentAllocation:
    warehouse_id: str
    items: Dict[str, int]


@dataclass(frozen=True, slots=True)
class FulfillmentPlan:
    order_id: int
    shipments: List[ShipmentAllocation]

    def shipped(self) -> Dict[str, int]:
        totals: Counter = Counter()
        for shipment in self.shipments:
            totals.update(shipment.items)
        return dict(totals)


@dataclass(frozen=True, slots=True)
class OrderFailure:
    order_id: int
    kind: FailureKind
    reason: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.reason}"


@dataclass(frozen=True, slots=True)
class UnexpectedError:
    """A non-domain exception captured while evaluating one order."""

    order_id: int
    phase: str
    error: BaseException


@dataclass(slots=True)
class FulfillmentResult:
    plans: List[FulfillmentPlan] = field(default_factory=list)
    failures: List[OrderFailure] = field(default_factory=list)
    unexpected_errors: List[UnexpectedError] = field(default_factory=list)

    @property
    def has_unexpected_errors(self) -> bool:
        return bool(self.unexpected_errors)

    def plan_for(self, order_id: int) -> Optional[FulfillmentPlan]:
        return next((p for p in self.plans if p.order_id == order_id), None)

    def failure_for(self, order_id: int) -> Optional[OrderFailure]:
        return next((f for f in self.failures if f.order_id == order_id), None)

    def failures_by_kind(self) -> Dict[FailureKind, List[OrderFailure]]:
        grouped: Dict[FailureKind, List[OrderFailure]] = {}
        for failure in self.failures:
            grouped.setdefault(failure.kind, []).append(failure)
        return grouped

    def raise_for_unexpected(self) -> None:
        if self.unexpected_errors:
            raise BatchValidationError(list(self.unexpected_errors))
