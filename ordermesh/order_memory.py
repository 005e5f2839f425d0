"""Order repository kept in process memory."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from ordermesh.order_domain import Order, OrderNotFoundError, Repository, UpdateFn

logger = logging.getLogger(__name__)


class MemoryOrderRepository(Repository):
    """Thread-safe in-memory order store, seeded with one placeholder order."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._clock = clock
        self._store: list[Order] = [
            Order(
                id="fake-ID",
                customer_id="fake-CustomerID",
                status="fake-Status",
                payment_link="fake-PaymentLink",
                items=None,
            )
        ]

    def create(self, order: Order) -> Order:
        with self._lock:
            created = Order(
                id=str(int(self._clock())),
                customer_id=order.customer_id,
                status=order.status,
                payment_link=order.payment_link,
                items=order.items,
            )
            self._store.append(created)
            logger.debug(
                "memory_order_repo_create",
                extra={"input_order": order, "store_after_create": list(self._store)},
            )
            return created

    def get(self, order_id: str, customer_id: str) -> Order:
        with self._lock:
            for order in self._store:
                if order.id == order_id and order.customer_id == customer_id:
                    logger.debug(
                        "memory_order_repo_get || found || id=%s || customerID=%s || res=%r",
                        order_id,
                        customer_id,
                        order,
                    )
                    return order
        raise OrderNotFoundError(order_id)

    def update(self, order: Order, update_fn: UpdateFn) -> None:
        with self._lock:
            found = False
            for index, stored in enumerate(self._store):
                if stored.id == order.id and stored.customer_id == order.customer_id:
                    found = True
                    self._store[index] = update_fn(order)
            if not found:
                raise OrderNotFoundError(order.id)