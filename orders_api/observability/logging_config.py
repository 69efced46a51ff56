"""
Structured Logging Configuration

Every log line is a single JSON object on stdout:

    {"timestamp": "...", "level": "info", "logger": "orders_api.orders.service",
     "msg": "Order created", "orderId": 7, "customer": "Alice", "total": 120,
     "trace_id": "4bf9...", "span_id": "00f0..."}

Business fields (orderId, from, to, ...) are passed through `extra=` and
mirror the span attributes of the operation that logged them. trace_id and
span_id come from the active span, so a log line can be joined to its trace
by either key.
"""

import logging
import sys
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from .tracing import get_trace_context

STDOUT_HANDLER_NAME = "orders_api.stdout_json"

# Record attributes added by opentelemetry-instrumentation-logging.
_OTEL_RECORD_FIELDS = ("otelTraceID", "otelSpanID", "otelTraceSampled", "otelServiceName")


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that injects trace_id and span_id into every log.

    When the logging instrumentation is active the ids are already on the
    record (otelTraceID/otelSpanID); otherwise they are read from the
    current span. The otel* attributes themselves are not emitted.
    """

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        for key in _OTEL_RECORD_FIELDS:
            log_record.pop(key, None)

        trace_id = getattr(record, "otelTraceID", "0")
        if trace_id and trace_id != "0":
            log_record['trace_id'] = trace_id
            log_record['span_id'] = getattr(record, "otelSpanID", "0")
        else:
            log_record.update(get_trace_context())

        log_record['level'] = record.levelname.lower()
        log_record['logger'] = record.name
        log_record['timestamp'] = self.formatTime(record, self.datefmt)


def setup_logging(level: str = "INFO", service_name: str = "orders-api") -> None:
    """
    Configure structured JSON logging for the application.

    Idempotent: a second call replaces the stdout handler installed by the
    first instead of stacking another one.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Service name to include in the startup line
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(STDOUT_HANDLER_NAME)
    handler.setFormatter(CorrelationJsonFormatter(
        fmt='%(timestamp)s %(level)s %(logger)s %(message)s',
        rename_fields={'message': 'msg'},
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        if existing.get_name() == STDOUT_HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Structured logging initialized for {service_name}")
