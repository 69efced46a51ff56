"""
Exception classes for the orders API.

Client-facing errors carry the HTTP status they map to, so routes and the
global exception handlers can turn them into `{"error": <message>}` bodies
without leaking internal details.
"""

from typing import Any, Dict


class OrdersAPIError(Exception):
    """Base exception for all service errors."""

    http_status: int = 500

    def __init__(self, message: str, http_status: int = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for API responses"""
        return {"error": self.message}


class OrderValidationError(OrdersAPIError):
    """Request body is missing required order fields."""

    http_status = 400


class OrderNotFoundError(OrdersAPIError):
    """No order with the requested identifier."""

    http_status = 404

    def __init__(self, order_id: Any):
        super().__init__("Order not found")
        self.order_id = order_id


class TelemetryInitializationError(OrdersAPIError):
    """
    Exporter or provider construction failed at startup.

    Fatal: the service must not start without its telemetry pipeline.
    """

    http_status = 500


class OrderCreationError(OrdersAPIError):
    """Unexpected failure while creating an order. Wraps the original exception."""

    http_status = 500
