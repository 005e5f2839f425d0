"""Order entities, their wire form and the repository contract."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional


@dataclass
class Item:
    """A priced stock item as it appears on an order."""

    id: str = ""
    name: str = ""
    quantity: int = 0
    price_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the item."""
        return {
            "ID": self.id,
            "Name": self.name,
            "Quantity": self.quantity,
            "PriceID": self.price_id,
        }


@dataclass(frozen=True)
class ItemWithQuantity:
    """An item id with the quantity a customer asks for."""

    id: str
    quantity: int


@dataclass
class Order:
    """A customer order."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    payment_link: str = ""
    items: Optional[list[Item]] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the order."""
        return {
            "ID": self.id,
            "CustomerID": self.customer_id,
            "Status": self.status,
            "PaymentLink": self.payment_link,
            "Items": None if self.items is None else [item.to_dict() for item in self.items],
        }


class OrderNotFoundError(LookupError):
    """No order with the given id exists for the customer."""

    def __init__(self, order_id: str):
        super().__init__(f"Order '{order_id}' not found")
        self.order_id = order_id


UpdateFn = Callable[[Order], Order]


class Repository(abc.ABC):
    """Storage for orders."""

    @abc.abstractmethod
    def create(self, order: Order) -> Order:
        """Store a new order and return it with its assigned id."""

    @abc.abstractmethod
    def get(self, order_id: str, customer_id: str) -> Order:
        """Return the order, or raise OrderNotFoundError."""

    @abc.abstractmethod
    def update(self, order: Order, update_fn: UpdateFn) -> None:
        """Replace the stored order with ``update_fn(order)``."""


def new_order(
    order_id: str,
    customer_id: str,
    status: str,
    payment_link: str,
    items: Optional[list[Item]],
) -> Order:
    """Build an order, rejecting missing required fields."""
    if not order_id:
        raise ValueError("empty id")
    if not customer_id:
        raise ValueError("empty customerID")
    if not status:
        raise ValueError("empty status")
    if items is None:
        raise ValueError("empty items")
    return Order(
        id=order_id,
        customer_id=customer_id,
        status=status,
        payment_link=payment_link,
        items=items,
    )


def item_from_dict(data: Mapping[str, Any]) -> Item:
    """Read an item from its JSON form."""
    return Item(
        id=str(data.get("ID") or ""),
        name=str(data.get("Name") or ""),
        quantity=int(data.get("Quantity") or 0),
        price_id=str(data.get("PriceID") or ""),
    )


def order_from_dict(data: Mapping[str, Any]) -> Order:
    """Read an order from its JSON form."""
    raw_items = data.get("Items")
    return Order(
        id=str(data.get("ID") or ""),
        customer_id=str(data.get("CustomerID") or ""),
        status=str(data.get("Status") or ""),
        payment_link=str(data.get("PaymentLink") or ""),
        items=None if raw_items is None else [item_from_dict(item) for item in raw_items],
    )