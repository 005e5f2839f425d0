import logging

import pytest

from ordermesh.decorator import TodoMetrics
from ordermesh.order_domain import ItemWithQuantity
from ordermesh.order_ports import StockGRPC
from ordermesh.stock_app import (
    CheckIfItemsInStock,
    CheckIfItemsInStockHandler,
    GetItems,
    StockServer,
    new_application,
    new_check_if_items_in_stock_handler,
    new_get_items_handler,
)
from ordermesh.stock_domain import ItemsNotFoundError, MemoryStockRepository

LOGGER = logging.getLogger("test.stock")


def test_check_assigns_known_price_ids():
    handler = CheckIfItemsInStockHandler(MemoryStockRepository())
    items = handler.handle(CheckIfItemsInStock(items=[ItemWithQuantity("1", 2), ItemWithQuantity("2", 3)]))
    assert [item.price_id for item in items] == [
        "price_1QzWgnAe8D0pztRYOGHS1igj",
        "price_1R0J9KAe8D0pztRYHqE5sbPn",
    ]


def test_check_unknown_id_falls_back_to_first_price():
    handler = CheckIfItemsInStockHandler(MemoryStockRepository())
    (item,) = handler.handle(CheckIfItemsInStock(items=[ItemWithQuantity("unknown", 4)]))
    assert item.price_id == "price_1QzWgnAe8D0pztRYOGHS1igj"
    assert item.id == "unknown"
    assert item.quantity == 4


def test_check_empty_request_gives_empty_list():
    handler = CheckIfItemsInStockHandler(MemoryStockRepository())
    assert handler.handle(CheckIfItemsInStock(items=[])) == []


def test_get_items_records_success_metric():
    metrics = TodoMetrics()
    handler = new_get_items_handler(MemoryStockRepository(), LOGGER, metrics)
    items = handler.handle(GetItems(item_ids=["item2"]))
    assert [item.id for item in items] == ["item2"]
    assert metrics.values["querys.getitems.success"] == 1


def test_get_items_missing_raises_and_records_failure():
    metrics = TodoMetrics()
    handler = new_get_items_handler(MemoryStockRepository(), LOGGER, metrics)
    with pytest.raises(ItemsNotFoundError):
        handler.handle(GetItems(item_ids=["nothing"]))
    assert metrics.values["querys.getitems.fail"] == 1
    assert metrics.values["querys.getitems.success"] == 0


@pytest.mark.parametrize("factory", [new_check_if_items_in_stock_handler, new_get_items_handler])
def test_factories_reject_missing_repository(factory):
    with pytest.raises(ValueError):
        factory(None, LOGGER, TodoMetrics())


def test_server_check_reports_in_stock():
    server = StockServer(new_application())
    response = server.check_if_items_in_stock([ItemWithQuantity("item1", 5)])
    assert response.in_stock == 1
    assert [(item.id, item.quantity) for item in response.items] == [("item1", 5)]


def test_server_get_items():
    server = StockServer(new_application())
    response = server.get_items(["item2"])
    assert response.items[0].name == "stub item 2"


def test_server_get_items_propagates_not_found():
    server = StockServer(new_application())
    with pytest.raises(ItemsNotFoundError):
        server.get_items(["missing"])


def test_order_side_adapter_talks_to_stock_server():
    adapter = StockGRPC(StockServer(new_application()))
    assert [item.id for item in adapter.get_items(["item3"])] == ["item3"]
    checked = adapter.check_if_items_in_stock([ItemWithQuantity("2", 1)])
    assert checked.items[0].price_id == "price_1R0J9KAe8D0pztRYHqE5sbPn"