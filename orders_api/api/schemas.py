"""
Pydantic schemas for API request/response models.

Request fields are all optional at the schema level: a body missing
`customer` or `items` must reach the service so the create-order span records
the validation failure. Type errors (e.g. a string `count`) are rejected by
FastAPI before any span starts.
"""
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class CreateOrderRequest(BaseModel):
    """Request schema for creating an order."""

    customer: Optional[str] = Field(default=None, description="Customer name")
    items: Optional[Any] = Field(default=None, description="Ordered items")
    total: Optional[Union[int, float]] = Field(
        default=None, description="Order total in dollars (random 10-510 if omitted)"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"customer": "Alice", "items": ["Laptop", "Mouse"], "total": 1250},
                {"customer": "Bob", "items": ["Phone"]},
            ]
        }
    }


class UpdateOrderRequest(BaseModel):
    """Request schema for updating an order's status."""

    status: Optional[str] = Field(default=None, description="New status (unchanged if omitted)")

    model_config = {
        "json_schema_extra": {"examples": [{"status": "completed"}]}
    }


class SimulateRequest(BaseModel):
    """Request schema for generating synthetic traffic."""

    count: Optional[int] = Field(
        default=None, ge=0, le=10000, description="Number of orders to generate (default 10)"
    )


class OrderResponse(BaseModel):
    """Response schema for a single order."""

    id: int
    customer: str
    items: Any
    total: Union[int, float]
    status: str
    createdAt: str = Field(..., description="Creation timestamp (ISO 8601, UTC)")


class HealthResponse(BaseModel):
    """Response schema for the health check."""

    status: str = Field(..., description="Always 'healthy' while the process serves requests")
    uptime: float = Field(..., description="Seconds since the application started")
    orders: int = Field(..., description="Number of orders in the store")


class DeleteOrderResponse(BaseModel):
    """Response schema for order deletion."""

    message: str
    order: OrderResponse


class SimulateResponse(BaseModel):
    """Response schema for simulated traffic."""

    message: str
    total: int = Field(..., description="Number of orders in the store afterwards")


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str

