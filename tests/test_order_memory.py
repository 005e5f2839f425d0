import pytest

from ordermesh.order_domain import Item, Order, OrderNotFoundError
from ordermesh.order_memory import MemoryOrderRepository


def test_seeded_placeholder_order_is_present():
    repo = MemoryOrderRepository()
    order = repo.get("fake-ID", "fake-CustomerID")
    assert order.status == "fake-Status"
    assert order.payment_link == "fake-PaymentLink"
    assert order.items is None


def test_create_assigns_id_from_clock():
    repo = MemoryOrderRepository(clock=lambda: 1700000000.7)
    items = [Item(id="item1", quantity=1)]
    created = repo.create(Order(customer_id="c1", items=items))
    assert created.id == "1700000000"
    assert created.items == items
    assert repo.get(created.id, "c1") == created


def test_get_requires_matching_customer():
    repo = MemoryOrderRepository()
    with pytest.raises(OrderNotFoundError) as info:
        repo.get("fake-ID", "someone-else")
    assert info.value.order_id == "fake-ID"


def test_update_replaces_stored_order():
    repo = MemoryOrderRepository()
    seen = []

    def update_fn(order):
        seen.append(order)
        return Order(id=order.id, customer_id=order.customer_id, status="paid", items=[])

    incoming = Order(id="fake-ID", customer_id="fake-CustomerID", status="waiting_for_payment")
    repo.update(incoming, update_fn)
    assert seen == [incoming]
    assert repo.get("fake-ID", "fake-CustomerID").status == "paid"


def test_update_missing_order_raises():
    repo = MemoryOrderRepository()
    with pytest.raises(OrderNotFoundError, match="nope"):
        repo.update(Order(id="nope", customer_id="c1"), lambda o: o)


def test_update_fn_error_leaves_store_unchanged():
    repo = MemoryOrderRepository()

    def failing(order):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        repo.update(Order(id="fake-ID", customer_id="fake-CustomerID", status="x"), failing)
    assert repo.get("fake-ID", "fake-CustomerID").status == "fake-Status"