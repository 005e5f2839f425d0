import pytest

from ordermesh.stock_domain import ItemsNotFoundError, MemoryStockRepository


def test_known_item_is_returned():
    items = MemoryStockRepository().get_items(["item1"])
    assert len(items) == 1
    assert items[0].id == "item1"
    assert items[0].name == "stub item 1"
    assert items[0].quantity == 1000
    assert items[0].price_id == "stub_item1_price_id"


def test_stub_key_differs_from_item_id():
    items = MemoryStockRepository().get_items(["item_id"])
    assert items[0].id == "foo_item"
    assert items[0].name == "stub_item"


def test_order_of_request_is_kept():
    items = MemoryStockRepository().get_items(["item3", "item1", "item2"])
    assert [item.id for item in items] == ["item3", "item1", "item2"]


def test_partial_match_returns_found_only():
    items = MemoryStockRepository().get_items(["nope", "item2"])
    assert [item.id for item in items] == ["item2"]


def test_all_missing_raises_with_missing_ids():
    with pytest.raises(ItemsNotFoundError) as info:
        MemoryStockRepository().get_items(["a", "b"])
    assert info.value.missing == ["a", "b"]
    assert str(info.value) == "these items not found in stock: a,b"


def test_empty_request_raises():
    with pytest.raises(ItemsNotFoundError) as info:
        MemoryStockRepository().get_items([])
    assert info.value.missing == []


def test_repositories_do_not_share_items():
    first = MemoryStockRepository()
    second = MemoryStockRepository()
    first.get_items(["item1"])[0].quantity = 1
    assert second.get_items(["item1"])[0].quantity == 1000