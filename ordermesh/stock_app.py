"""Stock queries, the application that bundles them and its RPC surface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ordermesh.decorator import MetricsClient, QueryLoggingDecorator, TodoMetrics, apply_query_decorators
from ordermesh.order_domain import Item, ItemWithQuantity
from ordermesh.stock_domain import MemoryStockRepository, StockRepository

_PRICE_IDS = {
    "1": "price_1QzWgnAe8D0pztRYOGHS1igj",
    "2": "price_1R0J9KAe8D0pztRYHqE5sbPn",
}


@dataclass(frozen=True)
class CheckIfItemsInStock:
    items: list[ItemWithQuantity]


@dataclass(frozen=True)
class GetItems:
    item_ids: list[str]


class CheckIfItemsInStockHandler:
    """Attaches a price id to every requested item."""

    def __init__(self, stock_repo: StockRepository):
        self.stock_repo = stock_repo

    def handle(self, query: CheckIfItemsInStock) -> list[Item]:
        return [
            Item(
                id=item.id,
                quantity=item.quantity,
                price_id=_PRICE_IDS.get(item.id, _PRICE_IDS["1"]),
            )
            for item in query.items
        ]


class GetItemsHandler:
    """Looks up stock items by id."""

    def __init__(self, stock_repo: StockRepository):
        self.stock_repo = stock_repo

    def handle(self, query: GetItems) -> list[Item]:
        return self.stock_repo.get_items(query.item_ids)


@dataclass(frozen=True)
class StockApplication:
    """The decorated handlers of the stock service."""

    check_if_items_in_stock: Any
    get_items: Any


@dataclass(frozen=True)
class CheckIfItemsInStockResponse:
    in_stock: int
    items: list[Item] = field(default_factory=list)


@dataclass(frozen=True)
class _GetItemsResponse:
    items: list[Item] = field(default_factory=list)


class StockServer:
    """The stock service's RPC surface."""

    def __init__(self, application: StockApplication):
        self.application = application

    def get_items(self, item_ids: list[str]) -> _GetItemsResponse:
        return _GetItemsResponse(items=self.application.get_items.handle(GetItems(item_ids=item_ids)))

    def check_if_items_in_stock(self, items: list[ItemWithQuantity]) -> CheckIfItemsInStockResponse:
        checked = self.application.check_if_items_in_stock.handle(CheckIfItemsInStock(items=items))
        return CheckIfItemsInStockResponse(in_stock=1, items=checked)


def _require_repo(stock_repo: Any) -> None:
    if stock_repo is None:
        raise ValueError("stock_repo is None")


def new_check_if_items_in_stock_handler(
    stock_repo: StockRepository, logger: logging.Logger, metrics_client: MetricsClient
) -> QueryLoggingDecorator:
    """Build the stock-check query handler wrapped with logging and metrics."""
    _require_repo(stock_repo)
    return apply_query_decorators(CheckIfItemsInStockHandler(stock_repo), logger, metrics_client)


def new_get_items_handler(
    stock_repo: StockRepository, logger: logging.Logger, metrics_client: MetricsClient
) -> QueryLoggingDecorator:
    """Build the get-items query handler wrapped with logging and metrics."""
    _require_repo(stock_repo)
    return apply_query_decorators(GetItemsHandler(stock_repo), logger, metrics_client)


def new_application() -> StockApplication:
    """Wire the stock service on an in-memory repository."""
    stock_repo = MemoryStockRepository()
    app_logger = logging.getLogger("ordermesh.stock")
    metrics_client = TodoMetrics()
    return StockApplication(
        check_if_items_in_stock=new_check_if_items_in_stock_handler(stock_repo, app_logger, metrics_client),
        get_items=new_get_items_handler(stock_repo, app_logger, metrics_client),
    )