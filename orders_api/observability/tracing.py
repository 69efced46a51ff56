"""
Span Helpers

WHY A SCOPE HELPER:
-------------------
Every order operation needs the same four things from its span:
1. CURRENT: the span is active while the handler runs, so the log lines it
   writes carry its trace_id/span_id
2. ENDED: the span ends on every exit path, including exceptions
3. STATUS: failures are visible in the trace view without reading events
4. NO DOUBLE RECORDING: the SDK's own record-on-exception is switched off,
   so a failure produces at most one "exception" event

operation_span() does all four. Handlers only add attributes and call
mark_ok() on success.

STATUS CONVENTIONS:
- normal exit: status left as set by the caller (OK or unset)
- client error (OrdersAPIError with a 4xx status): ERROR + message, no
  exception event. "Order not found" is an expected outcome, not a crash.
- anything else: ERROR + message + recorded exception (the wrapped cause
  when there is one), then re-raised

FAILURE MODE:
OK is final in the SDK: once set, a later ERROR is ignored. Call mark_ok()
as the last statement of the happy path, after the log line, otherwise a
failure after it leaves a green span on a 500 response.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from ..exceptions import OrdersAPIError


@contextmanager
def operation_span(
    tracer: Tracer,
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
) -> Iterator[Span]:
    """
    Start a span as the current span and guarantee it is ended.

    Usage:
        with operation_span(tracer, "create-order") as span:
            span.set_attribute("order.id", order.id)

    The span is current for the duration of the block, so log lines emitted
    inside it carry its trace_id/span_id.
    """
    with tracer.start_as_current_span(
        name,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except OrdersAPIError as e:
            span.set_status(Status(StatusCode.ERROR, e.message))
            if e.http_status >= 500:
                span.record_exception(e.__cause__ or e)
            raise
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def mark_ok(span: Span) -> None:
    span.set_status(Status(StatusCode.OK))


def get_trace_context() -> dict:
    """
    Extract current trace ID and span ID for correlation.

    Example:
        logger.error("Order creation failed", extra=get_trace_context())
        # Output: {"msg": "Order creation failed", "trace_id": "abc123", "span_id": "xyz789"}

    Returns:
        Dict with trace_id and span_id (or empty if no active span)
    """
    span = trace.get_current_span()
    ctx = span.get_span_context()

    if ctx.is_valid:
        return {
            "trace_id": format(ctx.trace_id, "032x"),
            "span_id": format(ctx.span_id, "016x"),
        }
    return {}
