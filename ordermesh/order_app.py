"""Order commands and queries, and the application that bundles them."""

from __future__ import annotations

import abc
import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import pika
import pika.spec

from ordermesh.broker import EVENT_ORDER_CREATED
from ordermesh.decorator import (
    MetricsClient,
    QueryLoggingDecorator,
    TodoMetrics,
    apply_command_decorators,
    apply_query_decorators,
)
from ordermesh.order_domain import Item, ItemWithQuantity, Order, Repository, UpdateFn
from ordermesh.order_memory import MemoryOrderRepository

logger = logging.getLogger(__name__)


class StockService(abc.ABC):
    """What the order service needs from the stock service."""

    @abc.abstractmethod
    def check_if_items_in_stock(self, items: list[ItemWithQuantity]) -> Any:
        """Return a response whose ``items`` are the priced stock items."""

    @abc.abstractmethod
    def get_items(self, item_ids: list[str]) -> list[Item]:
        """Return the stock items with the given ids."""


@dataclass(frozen=True)
class CreateOrder:
    customer_id: str
    items: list[ItemWithQuantity]


@dataclass(frozen=True)
class CreateOrderResult:
    order_id: str


@dataclass(frozen=True)
class UpdateOrder:
    order: Order
    update_fn: Optional[UpdateFn] = None


@dataclass(frozen=True)
class GetCustomerOrder:
    customer_id: str
    order_id: str


def pack_items(items: Iterable[ItemWithQuantity]) -> list[ItemWithQuantity]:
    """Merge entries with the same id, summing their quantities."""
    merged: dict[str, int] = {}
    for item in items:
        merged[item.id] = merged.get(item.id, 0) + item.quantity
    return [ItemWithQuantity(id=item_id, quantity=qty) for item_id, qty in merged.items()]


class CreateOrderHandler:
    """Validates items against stock, stores the order and announces it."""

    def __init__(self, order_repo: Repository, stock_service: StockService, channel: Any):
        self.order_repo = order_repo
        self.stock_service = stock_service
        self.channel = channel

    def _validate(self, items: list[ItemWithQuantity]) -> list[Item]:
        if not items:
            raise ValueError("must have at least 1 item")
        response = self.stock_service.check_if_items_in_stock(pack_items(items))
        return list(response.items)

    def handle(self, cmd: CreateOrder) -> CreateOrderResult:
        valid_items = self._validate(cmd.items)
        order = self.order_repo.create(Order(customer_id=cmd.customer_id, items=valid_items))
        declared = self.channel.queue_declare(
            queue=EVENT_ORDER_CREATED,
            durable=True,
            exclusive=False,
            auto_delete=False,
        )
        self.channel.basic_publish(
            exchange="",
            routing_key=declared.method.queue,
            body=json.dumps(order.to_dict()).encode("utf-8"),
            properties=pika.BasicProperties(
                content_type="application/json",
                delivery_mode=pika.spec.PERSISTENT_DELIVERY_MODE,
            ),
        )
        return CreateOrderResult(order_id=order.id)


class UpdateOrderHandler:
    """Applies an update function to a stored order."""

    def __init__(self, order_repo: Repository):
        self.order_repo = order_repo

    def handle(self, cmd: UpdateOrder) -> None:
        update_fn = cmd.update_fn
        if update_fn is None:
            logger.warning("updateOrderHandler got nil UpdateFn, order=%r", cmd.order)
            # Without an update function the given order is stored as it is.
            update_fn = copy.copy
        self.order_repo.update(cmd.order, update_fn)


class GetCustomerOrderHandler:
    """Looks up one order of one customer."""

    def __init__(self, order_repo: Repository):
        self.order_repo = order_repo

    def handle(self, query: GetCustomerOrder) -> Order:
        return self.order_repo.get(query.order_id, query.customer_id)


@dataclass(frozen=True)
class OrderApplication:
    """The decorated handlers of the order service."""

    create_order: Any
    update_order: Any
    get_customer_order: Any


def _require(value: Any, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} is None")


def new_create_order_handler(
    order_repo: Repository,
    stock_service: StockService,
    channel: Any,
    logger: logging.Logger,
    metrics_client: MetricsClient,
) -> QueryLoggingDecorator:
    """Build the create-order handler wrapped with logging and metrics."""
    _require(order_repo, "order_repo")
    _require(stock_service, "stock_service")
    _require(channel, "channel")
    return apply_command_decorators(
        CreateOrderHandler(order_repo, stock_service, channel), logger, metrics_client
    )


def new_update_order_handler(
    order_repo: Repository, logger: logging.Logger, metrics_client: MetricsClient
) -> QueryLoggingDecorator:
    """Build the update-order handler wrapped with logging and metrics."""
    _require(order_repo, "order_repo")
    return apply_command_decorators(UpdateOrderHandler(order_repo), logger, metrics_client)


def new_get_customer_order_handler(
    order_repo: Repository, logger: logging.Logger, metrics_client: MetricsClient
) -> QueryLoggingDecorator:
    """Build the get-order query handler wrapped with logging and metrics."""
    _require(order_repo, "order_repo")
    return apply_query_decorators(GetCustomerOrderHandler(order_repo), logger, metrics_client)


def new_application(stock_service: StockService, channel: Any) -> OrderApplication:
    """Wire the order service on an in-memory repository."""
    order_repo = MemoryOrderRepository()
    app_logger = logging.getLogger("ordermesh.order")
    metrics_client = TodoMetrics()
    return OrderApplication(
        create_order=new_create_order_handler(order_repo, stock_service, channel, app_logger, metrics_client),
        update_order=new_update_order_handler(order_repo, app_logger, metrics_client),
        get_customer_order=new_get_customer_order_handler(order_repo, app_logger, metrics_client),
    )