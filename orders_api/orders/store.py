"""
In-memory order store.

An insertion-ordered list plus an id counter. Ids start at 1, are never
reused (not even after a delete) and strictly increase.

No locking: the store is only touched from async route handlers running on
the single event loop, and none of them awaits between reading and mutating
it, so mutations never interleave.
"""

from typing import Any, List, Optional, Union

from .models import Order, OrderStatus


class OrderStore:
    """Insertion-ordered sequence of orders with id allocation."""

    def __init__(self) -> None:
        self._orders: List[Order] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._orders)

    def list(self) -> List[Order]:
        """All orders in insertion order (a copy of the sequence)."""
        return list(self._orders)

    def add(self, customer: str, items: Any, total: Union[int, float]) -> Order:
        """Allocate the next id and append a new pending order."""
        order = Order(
            id=self._next_id,
            customer=customer,
            items=items,
            total=total,
            status=OrderStatus.PENDING.value,
        )
        self._next_id += 1
        self._orders.append(order)
        return order

    def get(self, order_id: int) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def remove(self, order_id: int) -> Optional[Order]:
        """Remove and return the order, or None if no such id."""
        for index, order in enumerate(self._orders):
            if order.id == order_id:
                return self._orders.pop(index)
        return None
