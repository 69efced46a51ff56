"""
Observability Package

The three pillars for the orders API, all shipped over OTLP/HTTP:
1. TRACES: one span per order operation (create-order, update-order, ...)
2. METRICS: orders_total, order_value_dollars, active_orders
3. LOGS: JSON lines on stdout, also exported as OTel log records

Spans and log lines share the order id (and the trace id), which is what
lets a log line be joined to its trace after the fact.
"""
from .instrumentation import Telemetry, TelemetryConfig, initialize_observability
from .logging_config import setup_logging
from .metrics import OrderMetrics, create_order_metrics
from .tracing import get_trace_context, operation_span

__all__ = [
    "Telemetry",
    "TelemetryConfig",
    "initialize_observability",
    "setup_logging",
    "OrderMetrics",
    "create_order_metrics",
    "get_trace_context",
    "operation_span",
]
