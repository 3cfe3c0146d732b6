from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from fulfillment.allocation import AllocationPlanner
from fulfillment.catalog import Catalog
from fulfillment.errors import WarehouseDoesNotExistError
from fulfillment.models import (
    FailureKind,
    FulfillmentPlan,
    FulfillmentResult,
    Order,
    OrderFailure,
    UnexpectedError,
    Warehouse,
)
from fulfillment.services import ReservationCommitter
from fulfillment.store import Store
from fulfillment.validation import MISSING_ORDER_ID, FeasibilityChecker, OrderValidator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EngineConfig:
    max_workers: Optional[int] = None
    # When True, any unexpected error in phase 1 stops phase 2 for the whole batch.
    halt_on_unexpected_errors: bool = False


@dataclass(slots=True)
class _Screening:
    order: Optional[Order]
    failure: Optional[OrderFailure] = None
    unexpected: Optional[UnexpectedError] = None


class FulfillmentEngine:
    """
    Two phases per batch:

    1. validate + feasibility for every order on a thread pool (read-only);
    2. once the pool has drained, plan + commit surviving orders one at a time
       in ascending order id.

    Every input order ends up in exactly one of result.plans / result.failures.
    """

    def __init__(
        self,
        store: Store,
        catalog: Optional[Catalog] = None,
        config: Optional[EngineConfig] = None,
        validator: Optional[OrderValidator] = None,
        checker: Optional[FeasibilityChecker] = None,
        planner: Optional[AllocationPlanner] = None,
    ):
        self.store = store
        self.config = config or EngineConfig()
        self.validator = validator or OrderValidator()
        self.checker = checker or FeasibilityChecker(store, catalog)
        self.planner = planner or AllocationPlanner(store)
        self.committer = ReservationCommitter(store)

    @classmethod
    def for_warehouses(cls, warehouses: Iterable[Warehouse], **kwargs) -> FulfillmentEngine:
        store = Store()
        for warehouse in warehouses:
            store.register(warehouse)
        return cls(store, **kwargs)

    def process(self, orders: Sequence[Optional[Order]]) -> FulfillmentResult:
        result = FulfillmentResult()
        if not orders:
            return result

        self.store.log(f"BATCH START orders={len(orders)} warehouses={len(self.store.warehouses)}")

        survivors: List[Order] = []
        for screening in self._screen_all(orders):
            if screening.unexpected is not None:
                result.unexpected_errors.append(screening.unexpected)
            if screening.failure is not None:
                result.failures.append(screening.failure)
            else:
                survivors.append(screening.order)

        survivors.sort(key=lambda o: o.order_id)

        if result.unexpected_errors and self.config.halt_on_unexpected_errors:
            self._skip_all(survivors, result)
        else:
            for order in survivors:
                self._allocate(order, result)

        self.store.log(
            f"BATCH END plans={len(result.plans)} failures={len(result.failures)} "
            f"unexpected={len(result.unexpected_errors)}"
        )
        return result

    # Phase 1

    def _screen_all(self, orders: Sequence[Optional[Order]]) -> List[_Screening]:
        slots: List[Optional[_Screening]] = [None] * len(orders)

        def work(index: int) -> None:
            slots[index] = self._screen(orders[index])

        # Leaving the with-block waits for every worker; no reservation can start before that.
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            list(executor.map(work, range(len(orders))))

        return [s for s in slots if s is not None]

    def _screen(self, order: Optional[Order]) -> _Screening:
        order_id = _order_id(order)
        try:
            failure = self.validator.validate(order)
            if failure is None:
                failure = self.checker.check(order)
        except Exception as e:
            logger.exception("unexpected error while validating order %s", order_id)
            failure = OrderFailure(order_id, FailureKind.UNEXPECTED_ERROR, f"Unexpected error: {e}")
            self.store.log(f"[order={order_id}] SCREEN FAILED: {failure}")
            return _Screening(order, failure, UnexpectedError(order_id, "validation", e))

        if failure is not None:
            self.store.log(f"[order={order_id}] SCREEN FAILED: {failure}")
            return _Screening(order, failure)

        self.store.log(f"[order={order_id}] SCREEN OK")
        return _Screening(order)

    # Phase 2

    def _allocate(self, order: Order, result: FulfillmentResult) -> None:
        try:
            outcome = self.planner.plan(order)
            if isinstance(outcome, OrderFailure):
                self._fail(outcome, result)
                return
            self.committer.commit(outcome)
        except WarehouseDoesNotExistError as e:
            self._fail(OrderFailure(order.order_id, FailureKind.WAREHOUSE_DOES_NOT_EXIST, str(e)), result)
            return
        except Exception as e:
            logger.exception("unexpected error while allocating order %s", order.order_id)
            result.unexpected_errors.append(UnexpectedError(order.order_id, "allocation", e))
            self._fail(OrderFailure(order.order_id, FailureKind.UNEXPECTED_ERROR, f"Allocation error: {e}"), result)
            return

        self._succeed(outcome, result)

    def _succeed(self, plan: FulfillmentPlan, result: FulfillmentResult) -> None:
        result.plans.append(plan)
        warehouses = ",".join(s.warehouse_id for s in plan.shipments)
        self.store.log(f"[order={plan.order_id}] ALLOCATED shipments={len(plan.shipments)} from={warehouses}")

    def _fail(self, failure: OrderFailure, result: FulfillmentResult) -> None:
        result.failures.append(failure)
        self.store.log(f"[order={failure.order_id}] ALLOCATION FAILED: {failure}")

    def _skip_all(self, survivors: List[Order], result: FulfillmentResult) -> None:
        reason = f"Allocation skipped: {len(result.unexpected_errors)} unexpected error(s) during validation."
        self.store.log(f"BATCH HALTED: {reason}")
        for order in survivors:
            result.failures.append(OrderFailure(order.order_id, FailureKind.SKIPPED, reason))
            self.store.log(f"[order={order.order_id}] SKIPPED")


def _order_id(order: Optional[Order]) -> int:
    if order is None:
        return MISSING_ORDER_ID
    return getattr(order, "order_id", MISSING_ORDER_ID)
