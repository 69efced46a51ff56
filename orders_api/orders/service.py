"""
Order service with tracing, metrics and correlated logging.

Each operation follows the same shape:
    start span -> store read/mutation -> record metrics -> log line
    -> span status/attributes -> end span

Span attribute conventions:
    create-order      order.id, order.customer, order.total
    update-order      order.id, order.old_status, order.new_status
    delete-order      order.id, order.status
    list-orders       orders.count
    simulate-traffic  simulate.count

The log line of a state change carries the same values under the keys
orderId / customer / total / from / to, inside the span, so it also carries
the span's trace_id.
"""

import logging
import random
from typing import Any, List, Optional, Union

from opentelemetry.trace import Tracer

from ..exceptions import OrderCreationError, OrderNotFoundError, OrderValidationError
from ..observability.metrics import OrderMetrics
from ..observability.tracing import mark_ok, operation_span
from .models import Order, OrderStatus
from .store import OrderStore

logger = logging.getLogger(__name__)

SIMULATED_CUSTOMERS = ("Alice", "Bob", "Charlie", "Diana", "Eve")
SIMULATED_ITEMS = ("Laptop", "Phone", "Tablet", "Headphones", "Monitor", "Keyboard")
DEFAULT_SIMULATE_COUNT = 10


def _missing(value: Any) -> bool:
    """None, "", 0 and False count as absent; empty lists and objects do not."""
    return value is None or (not value and not isinstance(value, (list, dict)))


class OrderService:
    """
    Order operations instrumented with one span per call.

    The store, instruments and tracer are injected at wiring time and shared
    by every request.
    """

    def __init__(
        self,
        store: OrderStore,
        metrics: OrderMetrics,
        tracer: Tracer,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.metrics = metrics
        self.tracer = tracer
        self.rng = rng or random.Random()

    def list_orders(self) -> List[Order]:
        with operation_span(self.tracer, "list-orders") as span:
            orders = self.store.list()
            span.set_attribute("orders.count", len(orders))
            mark_ok(span)
            return orders

    def create_order(
        self,
        customer: Optional[str],
        items: Any,
        total: Optional[Union[int, float]] = None,
    ) -> Order:
        """
        Create a pending order.

        A missing or zero total is replaced by a random whole-dollar amount
        between 10 and 510.

        Raises:
            OrderValidationError: customer or items missing
            OrderCreationError: anything unexpected while creating
        """
        with operation_span(self.tracer, "create-order") as span:
            if not customer or _missing(items):
                raise OrderValidationError("customer and items required")

            try:
                order = self.store.add(customer, items, total or self.rng.randint(10, 510))
                self.metrics.record_created(order)

                span.set_attribute("order.id", order.id)
                span.set_attribute("order.customer", order.customer)
                span.set_attribute("order.total", order.total)
                logger.info(
                    "Order created",
                    extra={"orderId": order.id, "customer": order.customer, "total": order.total},
                )
                mark_ok(span)
                return order
            except Exception as e:
                logger.error("Order creation failed", extra={"error": str(e)})
                raise OrderCreationError(str(e)) from e

    def update_order(self, order_id: Optional[int], status: Optional[str] = None) -> Order:
        """
        Change an order's status.

        active_orders goes down only on the transition into completed, so
        completing an already completed order is a no-op for the metric.

        Raises:
            OrderNotFoundError: no order with this id
        """
        with operation_span(self.tracer, "update-order") as span:
            order = self._find(order_id, span)
            old_status = order.status
            order.status = status or order.status

            if order.is_completed and old_status != OrderStatus.COMPLETED:
                self.metrics.record_completed()

            span.set_attribute("order.id", order.id)
            span.set_attribute("order.old_status", old_status)
            span.set_attribute("order.new_status", order.status)
            logger.info(
                "Order updated",
                extra={"orderId": order.id, "from": old_status, "to": order.status},
            )
            return order

    def delete_order(self, order_id: Optional[int]) -> Order:
        """
        Remove an order.

        Raises:
            OrderNotFoundError: no order with this id
        """
        with operation_span(self.tracer, "delete-order") as span:
            order = self._find(order_id, span)
            self.store.remove(order.id)
            self.metrics.record_removed(order)

            span.set_attribute("order.id", order.id)
            span.set_attribute("order.status", order.status)
            logger.info("Order deleted", extra={"orderId": order.id})
            return order

    def simulate_traffic(self, count: Optional[int] = None) -> int:
        """
        Create `count` random orders (default 10) from the fixed customer and
        item pools. Returns the number created.
        """
        count = count or DEFAULT_SIMULATE_COUNT

        with operation_span(self.tracer, "simulate-traffic", {"simulate.count": count}) as span:
            for _ in range(count):
                customer = self.rng.choice(SIMULATED_CUSTOMERS)
                item = self.rng.choice(SIMULATED_ITEMS)
                total = self.rng.randint(10, 1010)

                order = self.store.add(customer, [item], total)
                self.metrics.record_created(order)
                logger.info(
                    "Simulated order",
                    extra={"orderId": order.id, "customer": customer, "item": item, "total": total},
                )

            mark_ok(span)
            return count

    def _find(self, order_id: Optional[int], span) -> Order:
        order = self.store.get(order_id) if order_id is not None else None
        if order is None:
            if order_id is not None:
                span.set_attribute("order.id", order_id)
            raise OrderNotFoundError(order_id)
        return order
