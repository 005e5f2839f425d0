"""Stock repository contract and an in-memory implementation."""

from __future__ import annotations

import abc
import copy
import threading
from typing import Iterable

from ordermesh.order_domain import Item


class ItemsNotFoundError(LookupError):
    """None of the requested items exist in stock."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"these items not found in stock: {','.join(self.missing)}")


class StockRepository(abc.ABC):
    """Storage for stock items."""

    @abc.abstractmethod
    def get_items(self, ids: list[str]) -> list[Item]:
        """Return the items with the given ids."""


_STUB_ITEMS = {
    "item_id": Item(id="foo_item", name="stub_item", quantity=1000, price_id="stub_item_price_id"),
    "item1": Item(id="item1", name="stub item 1", quantity=1000, price_id="stub_item1_price_id"),
    "item2": Item(id="item2", name="stub item 2", quantity=1000, price_id="stub_item2_price_id"),
    "item3": Item(id="item3", name="stub item 3", quantity=1000, price_id="stub_item3_price_id"),
}


class MemoryStockRepository(StockRepository):
    """Thread-safe stock store seeded with a few stub items."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._store: dict[str, Item] = copy.deepcopy(_STUB_ITEMS)

    def get_items(self, ids: list[str]) -> list[Item]:
        """Return the items found, in request order.

        Raises ItemsNotFoundError only when not a single id was found.
        """
        with self._lock:
            found = [self._store[item_id] for item_id in ids if item_id in self._store]
            missing = [item_id for item_id in ids if item_id not in self._store]
        if found:
            return found
        raise ItemsNotFoundError(missing)