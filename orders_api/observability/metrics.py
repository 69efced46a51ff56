"""
Business Metrics for the Orders API

WHY OTEL INSTRUMENTS (NOT prometheus_client COUNTERS):
------------------------------------------------------
The instruments live on the OTel meter, so the same numbers reach the
collector over OTLP and, when PROMETHEUS_ENABLED is set, the /metrics scrape
endpoint. One recording call feeds both readers.

INSTRUMENTS:
- orders_total (Counter): one per created order, labels customer/status
- order_value_dollars (Histogram): order totals, label customer
- active_orders (UpDownCounter): orders not yet completed

active_orders BOOKKEEPING:
  create                      +1
  update into "completed"     -1 (only on the transition, never twice)
  delete of a non-completed   -1
  delete of a completed        0 (it already left the active set)

Anything else would let the gauge drift below the number of pending orders
in the store, and the dashboard would slowly go negative.

FAILURE MODE:
Recording only aggregates in memory; the metric reader exports in the
background, so a call here never blocks on or fails because of the collector.
If the collector is down, the periodic export fails and the points for that
interval are lost. The in-memory aggregates keep counting.

CARDINALITY:
The customer label is unbounded for real input. Simulated traffic draws from
five fixed names, which is what the dashboards are built around.
"""

from dataclasses import dataclass

from opentelemetry.metrics import Counter, Histogram, Meter, UpDownCounter

from ..orders.models import Order


@dataclass(frozen=True)
class OrderMetrics:
    """The three order instruments, created once at startup."""

    orders_total: Counter
    order_value_dollars: Histogram
    active_orders: UpDownCounter

    def record_created(self, order: Order) -> None:
        """Record a newly created order."""
        self.orders_total.add(1, {"customer": order.customer, "status": order.status})
        self.order_value_dollars.record(order.total, {"customer": order.customer})
        self.active_orders.add(1)

    def record_completed(self) -> None:
        """An order moved into the completed status."""
        self.active_orders.add(-1)

    def record_removed(self, order: Order) -> None:
        """A deleted order only leaves the active set if it wasn't completed."""
        if not order.is_completed:
            self.active_orders.add(-1)


def create_order_metrics(meter: Meter) -> OrderMetrics:
    """Create the order instruments on the given meter."""
    return OrderMetrics(
        orders_total=meter.create_counter(
            "orders_total",
            description="Total orders created",
        ),
        order_value_dollars=meter.create_histogram(
            "order_value_dollars",
            description="Order values in dollars",
        ),
        active_orders=meter.create_up_down_counter(
            "active_orders",
            description="Currently active orders",
        ),
    )
